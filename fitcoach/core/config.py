from dotenv import load_dotenv
import os

# Load .env before reading settings
load_dotenv()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fitcoach.db")

# --- Auth ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
CLERK_WEBHOOK_SECRET = os.getenv("CLERK_WEBHOOK_SECRET")

# --- Text generation (Azure OpenAI) ---
OPENAI_ENDPOINT = os.getenv("AZURE_OPENAI_ENDPOINT")
OPENAI_API_KEY = os.getenv("AZURE_OPENAI_KEY")
CHAT_API_VERSION = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")
CHAT_DEPLOYMENT_NAME = os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-4o")
OPENAI_TIMEOUT = float(os.getenv("AZURE_OPENAI_TIMEOUT", 30.0))

# --- Volume ceilings ---
MAX_SETS_PER_EXERCISE = int(os.getenv("MAX_SETS_PER_EXERCISE", 6))
MAX_SETS_PER_SESSION = int(os.getenv("MAX_SETS_PER_SESSION", 24))
MAX_WEEKLY_SETS_PER_BODY_PART = int(os.getenv("MAX_WEEKLY_SETS_PER_BODY_PART", 20))
MAX_REPS_PER_SET = int(os.getenv("MAX_REPS_PER_SET", 30))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
