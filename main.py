from fastapi import FastAPI
from dotenv import load_dotenv
import logging

# Load environment variables
load_dotenv()

from resume_studio.config.settings import load_settings
from resume_studio.services.stores import InMemoryProfileStore, InMemorySuggestionStore

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Resume Studio Inline Suggestions")

app.state.settings = settings
app.state.suggestion_store = InMemorySuggestionStore()
app.state.profile_store = InMemoryProfileStore()

@app.get("/health")
async def health_check():
    return {"status": "ok", "ai_available": settings.ai_available}

# Import and include routers
from resume_studio.routers import suggestion_router
app.include_router(suggestion_router.router)
