"""
AI Assistant
Chat replies and reminder-email drafts via an LLM text-completion service.

Every failure of the completion service is recovered here with a canned
fallback string; callers never see an exception.
"""

import json
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence
from urllib.parse import quote

from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import PromptTemplate

from sentinel.schemas.order import AugmentedOrder, POStatus, PurchaseOrder
from sentinel.schemas.tiers import TierTable
from sentinel.utils.dates import to_iso
from sentinel.utils.logging import setup_logging, log_service_action
from sentinel.config import get_config


logger = setup_logging(__name__)
config = get_config()


CHAT_GREETING = (
    "Hello! I'm your PO Assistant. Ask me about your orders, overdue shipments, "
    "or upcoming deliveries."
)
CHAT_EMPTY_FALLBACK = "I'm sorry, I couldn't process that. Please try again."
CHAT_ERROR_FALLBACK = "The system is currently experiencing high load. Please try again in a few moments."
DRAFT_BODY_FALLBACK = "Please find attached the list of aged purchase orders requiring your review."


CHAT_PROMPT_TEMPLATE = """You are the Purchase Order Reminder Assistant.
Below are the current Purchase Orders:
---
{orders_json}
---
User Question: "{question}"

Instructions:
1. Be concise and professional.
2. Focus on high urgency and overdue orders if not specified.
3. Use markdown bolding for PO numbers and dates.
4. If the user asks for a summary, give a quick breakdown of high-value vs high-urgency orders.
"""


REMINDER_PROMPT_TEMPLATE = """Draft a highly professional business email report for {recipient_name}.
Recipient: {recipient_name} ({recipient})
Context: A list of aged and critical Purchase Orders that require immediate attention.

Purchase Order Data (JSON): {orders_json}

Requirements:
1. Subject Line: Start with [URGENT PO REPORT] and include today's date ({today}).
2. Greeting: "Dear {recipient_name},"
3. Content: A concise, bulleted summary of the most critical orders by age tier.
4. Tone: Collaborative yet urgent.
5. Closing: "Best regards, Procurement Intelligence Sentinel"

Output format:
SUBJECT: [The subject line]
BODY: [The email content]
"""


@dataclass
class ReminderDraft:
    subject: str
    body: str
    recipient: str
    order_count: int = 0

    @property
    def mailto(self) -> str:
        return build_mailto(self.recipient, self.subject, self.body)


def get_llm(model_name: str = None):
    """Get LLM instance based on provider."""
    model = model_name or config.LLM_MODEL

    if config.LLM_PROVIDER == "gemini":
        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=config.GOOGLE_API_KEY,
            temperature=config.LLM_TEMPERATURE,
            max_output_tokens=config.LLM_MAX_TOKENS,
        )
    else:
        return ChatOpenAI(
            model=model,
            api_key=config.LLM_API_KEY,
            base_url=config.LLM_API_BASE,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
        )


def get_llm_response_text(response) -> str:
    """
    Extract textual content from LangChain message objects, plain strings
    or dict-shaped responses. Returns "" when no text is present.
    """
    if response is None:
        return ""
    if isinstance(response, str):
        return response

    content = getattr(response, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # Gemini may return a list of content parts
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("text"):
                parts.append(str(part["text"]))
        return "".join(parts)

    if isinstance(response, dict):
        for key in ("content", "text", "output_text"):
            if response.get(key):
                return str(response[key])

    return ""


async def complete(prompt: str, model_name: str = None) -> str:
    """
    Send one prompt to the completion service and return its text.
    Raises on transport or provider errors.
    """
    if config.LLM_MOCK_MODE or config.LLM_PROVIDER == "mock":
        logger.info("Mock mode enabled - returning canned completion")
        return (
            "SUBJECT: [URGENT PO REPORT] Mock reminder\n"
            "BODY: Mock mode - no completion service was called."
        )

    llm = get_llm(model_name)
    response = await llm.ainvoke(prompt)
    return get_llm_response_text(response).strip()


async def complete_with_fallback(prompt: str) -> str:
    """Try the primary model, then the fallback model. Raises if both fail."""
    try:
        return await complete(prompt, config.LLM_MODEL)
    except Exception as primary_error:
        logger.warning(f"Primary model ({config.LLM_MODEL}) failed: {primary_error}")
        logger.info(f"Trying fallback model: {config.LLM_FALLBACK_MODEL}")
        return await complete(prompt, config.LLM_FALLBACK_MODEL)


def chat_context(orders: Sequence[PurchaseOrder]) -> str:
    """Compact JSON context; keeps token use down on large order sets."""
    context = [
        {
            "no": o.po_number,
            "vendor": o.vendor,
            "due": to_iso(o.delivery_date),
            "status": o.status.value,
            "priority": o.priority.value,
            "amount": o.total_amount,
        }
        for o in orders
    ]
    return json.dumps(context, indent=2)


async def ask(question: str, orders: Sequence[PurchaseOrder]) -> str:
    """
    Answer a free-text question about the order set.

    Returns the model reply, or a fallback string on empty output or failure.
    """
    prompt = PromptTemplate(
        input_variables=["orders_json", "question"],
        template=CHAT_PROMPT_TEMPLATE,
    ).format(orders_json=chat_context(orders), question=question)

    try:
        text = await complete_with_fallback(prompt)
    except Exception as e:
        logger.error(f"Assistant completion failed: {e}")
        return CHAT_ERROR_FALLBACK

    log_service_action(logger, "AIAssistant", "chat_reply", {"orders": len(orders)})
    return text or CHAT_EMPTY_FALLBACK


def select_reminder_orders(
    orders: Sequence[AugmentedOrder],
    tier_table: TierTable,
    limit: int = None,
) -> List[AugmentedOrder]:
    """Orders in the table's reminder tiers that are not yet delivered."""
    limit = limit if limit is not None else config.REMINDER_MAX_ITEMS
    reminder_labels = {label.value for label in tier_table.reminder}
    selected = [
        o for o in orders
        if o.urgency_tier.value in reminder_labels and o.status != POStatus.DELIVERED
    ]
    return selected[:limit]


def default_subject(today: date) -> str:
    return f"Daily PO Urgency Report - {today.isoformat()}"


def parse_draft(text: str, today: date) -> tuple:
    """
    Split a SUBJECT:/BODY: completion into (subject, body).
    A missing subject gets the default; a missing body keeps the whole text.
    """
    subject_match = re.search(r"SUBJECT:\s*(.*)", text or "", re.IGNORECASE)
    body_match = re.search(r"BODY:\s*([\s\S]*)", text or "", re.IGNORECASE)

    subject = subject_match.group(1).strip() if subject_match else ""
    body = body_match.group(1).strip() if body_match else (text or "").strip()
    return subject or default_subject(today), body or DRAFT_BODY_FALLBACK


async def draft_reminder_email(
    orders: Sequence[AugmentedOrder],
    tier_table: TierTable,
    today: date,
    recipient: Optional[str] = None,
    recipient_name: Optional[str] = None,
) -> ReminderDraft:
    """Generate the daily reminder email. Falls back to a canned draft on failure."""
    recipient = recipient or config.REMINDER_RECIPIENT
    recipient_name = recipient_name or config.REMINDER_RECIPIENT_NAME

    critical = select_reminder_orders(orders, tier_table)
    context = [
        {
            "po": o.po_number,
            "vendor": o.vendor,
            "age": o.age,
            "tier": o.urgency_tier.value,
            "status": o.status.value,
        }
        for o in critical
    ]

    prompt = PromptTemplate(
        input_variables=["recipient", "recipient_name", "orders_json", "today"],
        template=REMINDER_PROMPT_TEMPLATE,
    ).format(
        recipient=recipient,
        recipient_name=recipient_name,
        orders_json=json.dumps(context),
        today=today.isoformat(),
    )

    try:
        text = await complete_with_fallback(prompt)
        subject, body = parse_draft(text, today)
    except Exception as e:
        logger.error(f"Reminder draft generation failed: {e}")
        subject, body = default_subject(today), DRAFT_BODY_FALLBACK

    log_service_action(logger, "ReminderDrafter", "draft_ready", {"orders": len(critical)})
    return ReminderDraft(subject=subject, body=body, recipient=recipient, order_count=len(critical))


def build_mailto(recipient: str, subject: str, body: str) -> str:
    return f"mailto:{recipient}?subject={quote(subject)}&body={quote(body)}"
