import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ai_logic.processor import handle
from ai_logic.summary import summarize_response
from config import LOG_LEVEL
from models import QueryRequest

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Workspace Agent Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================ HEALTH CHECK ============================
@app.get("/")
def health_check():
    return {"status": "Workspace agent backend running"}


# ============================ AGENT QUERY ============================
@app.post("/agent/query")
def agent_query(req: QueryRequest):
    query = req.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")

    response = handle(query, req.credentials())
    response = summarize_response(response, query)
    return response.model_dump(by_alias=True, exclude_none=True, mode="json")
