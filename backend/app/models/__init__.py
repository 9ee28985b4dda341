# This file makes the 'models' directory a Python package.

from .user import User, UserRole, OtpPurpose
from .category import Category, UserCategoryPreference
from .follow import Follow
from .course import Course, Chapter, CourseEnrollment
from .video import Video, WatchedVideo, SavedVideo, SavedKind, Comment
from .quiz import Quiz, Question, Answer, QuizAttempt, UserQuizStats
