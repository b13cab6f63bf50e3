# config.py
import os

from dotenv import load_dotenv

load_dotenv()

# ============================ LLM ============================
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "groq").lower()
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# ============================ GOOGLE ============================
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
MEETING_TIMEZONE = os.getenv("MEETING_TIMEZONE", "Asia/Kolkata")

# ============================ MICROSOFT ============================
GRAPH_BASE_URL = os.getenv("GRAPH_BASE_URL", "https://graph.microsoft.com/v1.0")
OUTLOOK_TIMEZONE = os.getenv("OUTLOOK_TIMEZONE", "India Standard Time")

# ============================ MESSAGING / COMMERCE ============================
TELEGRAM_BASE_URL = os.getenv("TELEGRAM_BASE_URL", "https://api.telegram.org")
SLACK_BASE_URL = os.getenv("SLACK_BASE_URL", "https://slack.com/api")
DISCORD_BASE_URL = os.getenv("DISCORD_BASE_URL", "https://discord.com/api/v10")
SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-01")

# ============================ RUNTIME ============================
STATE_DIR = os.getenv("STATE_DIR", ".")
MAX_LIMIT = int(os.getenv("MAX_LIMIT", "200"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "15"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
