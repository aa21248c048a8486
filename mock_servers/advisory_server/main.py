"""Mock advisory process speaking the OpenAI chat-completions envelope"""

import json
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import List

from payoff_planner.domain.allocation import allocate
from payoff_planner.domain.models import Card, Policy

app = FastAPI(title="Mock Advisory Server", version="1.0.0")

# behavior=comply      policy-compliant plan wrapped in a ```json fence
# behavior=wrong_policy compliant numbers, but echoes a different policy
# behavior=garbage     content that is not JSON
BEHAVIORS = {"comply", "wrong_policy", "garbage"}

MISMATCHED_POLICY = {
    Policy.AVALANCHE: Policy.SNOWBALL,
    Policy.SNOWBALL: Policy.AVALANCHE,
    Policy.EVEN: Policy.AVALANCHE,
}


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatCompletionRequest(BaseModel):
    model: str = "local-model"
    messages: List[ChatMessage]
    temperature: float = 0.0
    stream: bool = False


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/v1/chat/completions")
def chat_completions(body: ChatCompletionRequest, behavior: str = "comply"):
    if behavior not in BEHAVIORS:
        raise HTTPException(status_code=400, detail=f"unknown behavior {behavior}")

    payload = _extract_payload(body.messages)
    if payload is None:
        raise HTTPException(status_code=422, detail="no Data: line in user prompt")

    if behavior == "garbage":
        return _envelope("I think you should pay the big card first.")

    policy = Policy(payload["profile"]["strategy"])
    cards = [
        Card(
            id=c["id"],
            name=c["name"],
            balance=c["balance"],
            apr=c["apr"],
            min_payment=c["minPayment"],
            credit_limit=c.get("creditLimit", 0.0),
        )
        for c in payload["cards"]
    ]
    plan = allocate(cards, payload["availableForDebt"], policy, horizon_months=0)

    declared = MISMATCHED_POLICY[policy] if behavior == "wrong_policy" else policy
    answer = {
        "strategyUsed": declared.value,
        "allocations": [
            {"cardId": a.card_id, "recommendedPayment": a.total_payment, "reasoning": f"{policy.value} order"}
            for a in plan.allocations
        ],
        "analysis": f"Minimums first, surplus by {policy.value}.",
    }

    return _envelope(f"```json\n{json.dumps(answer)}\n```")


def _extract_payload(messages: List[ChatMessage]):
    for message in messages:
        if message.role != "user":
            continue
        for line in message.content.splitlines():
            if line.startswith("Data: "):
                return json.loads(line[len("Data: "):])
    return None


def _envelope(content: str):
    return {
        "id": "mock-completion",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }
