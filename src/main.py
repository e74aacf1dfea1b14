from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from eth_account import Account
from eth_account.messages import encode_defunct
from typing import Dict, Any
from contextlib import asynccontextmanager
from config import logger
from services.covenant_session import CovenantSession
from services.tool_dispatcher import ToolDispatcher

# Auth message the caller's wallet must sign
COVENANT_AUTH_MESSAGE = """Covenant Finance strategy tools

This signature authenticates requests to the strategy tool API.

This signature will not trigger any blockchain transactions or grant any token approvals."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ConfigurationError propagates and aborts startup
    session = CovenantSession.from_config()
    app.state.signer_address = session.signer_address
    app.state.dispatcher = ToolDispatcher.from_session(session)
    logger.info("Tool dispatcher initialized on startup")

    yield


app = FastAPI(lifespan=lifespan)

# CORS for browser wallet clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class ToolRequest(BaseModel):
    wallet_address: str  # Must be the server's signing wallet
    signature: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


def verify_signature(message: str, signature: str, address: str) -> bool:
    """True when `signature` over `message` recovers to `address`."""
    try:
        signer = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception:
        return False
    return signer.lower() == address.lower()


@app.get("/tools")
async def list_tools():
    return {"tools": app.state.dispatcher.list_tools()}


@app.post("/tools/{tool_name}")
async def run_tool(tool_name: str, request: ToolRequest):
    if not verify_signature(COVENANT_AUTH_MESSAGE, request.signature, request.wallet_address):
        raise HTTPException(status_code=401, detail="Invalid signature or wallet address")

    if request.wallet_address.lower() != app.state.signer_address.lower():
        raise HTTPException(status_code=403, detail="Wallet is not authorized to use the signing key")

    dispatcher: ToolDispatcher = app.state.dispatcher
    if tool_name not in dispatcher.tool_names:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    logger.info(f"Running tool {tool_name} for {request.wallet_address}")
    result = await dispatcher.dispatch(tool_name, request.arguments)
    return {"tool": tool_name, "result": result}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=5050, reload=True)
