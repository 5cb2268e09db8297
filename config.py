import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

PORT = int(os.getenv("PORT", 4000))
DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("MONGO_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME", "shopper")
SECRET_KEY = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET", "secret_ecom")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGIN", "*").split(",") if o.strip()]
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "upload", "images"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
