from fastapi import APIRouter
from app.api.endpoints import auth, profile, users, follows, categories, courses, videos, quizzes, feed, uploads

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(follows.router, prefix="/follows", tags=["follows"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(videos.router, prefix="/videos", tags=["videos"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
