from .crud_user import user
from .crud_category import category
from .crud_course import course, chapter
from .crud_video import video, comment
