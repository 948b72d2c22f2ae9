from fastapi import APIRouter
from api.routes import health, chat, store

app_router = APIRouter()

app_router.include_router(health.router)
app_router.include_router(chat.router, prefix="/chat", tags=["chat"])
app_router.include_router(store.router, prefix="/store", tags=["store"])
