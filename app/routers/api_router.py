from fastapi import APIRouter
from app.routers import synthesize, reviews, people

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(synthesize.router, tags=["Synthesis"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(people.router, tags=["People & Cycles"])
