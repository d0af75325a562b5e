from fastapi import APIRouter
from endpoints.portfolio import router as portfolio_router
from endpoints.stocks import router as stocks_router

api_router = APIRouter()
api_router.include_router(portfolio_router)
api_router.include_router(stocks_router)
