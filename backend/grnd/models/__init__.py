from grnd.models.user import User
from grnd.models.folder import Folder
from grnd.models.template import WorkoutTemplate
from grnd.models.workout import Workout

__all__ = ["User", "Folder", "WorkoutTemplate", "Workout"]
