import os

from dotenv import load_dotenv

load_dotenv()

FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS", "./firebase.json")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

POSTS_COLLECTION = os.environ.get("POSTS_COLLECTION", "posts")
USERS_COLLECTION = os.environ.get("USERS_COLLECTION", "users")

MAX_POST_LENGTH = int(os.environ.get("MAX_POST_LENGTH", "500"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
