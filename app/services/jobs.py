"""
AI service-name generation, dispatched as a fire-and-forget QStash job.

The completion is delivered later to the ``/api/qstashWebhook`` callback;
here we only publish the request and hand back the message id.
"""
from __future__ import annotations

from typing import Any, Dict, List

import httpx

from app.config import settings
from app.errors import ConfigError, InvalidArgument, ProviderError
from app.logging_config import logger
from app.models.schemas import JobHandle

SYSTEM_PROMPT = (
    "Tu es un expert des domaines artisanaux tels que la sérrurerie, la plomberie, "
    "la peinture etc. Tu dois toujours me répondre seulement avec des mots clés "
    "séparés par des virgules comme cette phrase 'texte1,texte2,texte3'"
)

USER_PROMPT = (
    "Génère en français des services qui sont dans les même domaines que je te donne. "
    "Par exemple si je te donne comme domaine \"plomberie\", tu me réponds "
    "\"réparation canalisation\". Voici les domaines qui sont séparés par des virgules: "
    "{domains}. Il me faut 10 services par domaine"
)


def build_completion_request(services: List[str]) -> Dict[str, Any]:
    domains = ", ".join(s.strip() for s in services if s.strip())
    if not domains:
        raise InvalidArgument("Veuillez d'abord sélectionner des services")
    return {
        "model": settings.PERPLEXITY_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT.format(domains=domains)},
        ],
    }


async def submit_job(services: List[str]) -> JobHandle:
    body = build_completion_request(services)
    if not settings.QSTASH_TOKEN:
        raise ConfigError("Missing QSTASH_TOKEN. Don't forget to add that to your .env file.")

    url = f"{settings.QSTASH_URL.rstrip('/')}/v2/publish/{settings.PERPLEXITY_COMPLETIONS_URL}"
    headers = {
        "Authorization": f"Bearer {settings.QSTASH_TOKEN}",
        "Upstash-Forward-Authorization": f"Bearer {settings.PERPLEXITY_API_KEY}",
        "Content-Type": "application/json",
    }
    if settings.ROOT_DOMAIN:
        headers["Upstash-Callback"] = f"{settings.ROOT_DOMAIN.rstrip('/')}/api/qstashWebhook"

    try:
        async with httpx.AsyncClient(timeout=settings.LOOKUP_TIMEOUT_SECONDS) as client:
            resp = await client.post(url, headers=headers, json=body)
    except httpx.HTTPError as exc:
        raise ProviderError("Erreur lors de la génération de services avec l'IA.") from exc
    if resp.status_code >= 400:
        logger.error("service generation dispatch rejected", status=resp.status_code, body=resp.text)
        raise ProviderError("Erreur lors de la génération de services avec l'IA.")

    try:
        message_id = (resp.json() or {}).get("messageId")
    except ValueError as exc:
        raise ProviderError("QStash returned a malformed body") from exc
    if not message_id:
        raise ProviderError("QStash did not return a message id")
    logger.info("service generation dispatched", message_id=message_id, services=len(services))
    return JobHandle(message_id=message_id)
