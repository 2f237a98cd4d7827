"""
Form submission: sends a finished lead to the static-site form handler.

One POST, URL-encoded, to the hosting page's own path. The handler only
knows about a handful of top-level fields (form-name, nome, name, email,
message); everything else travels inside `message` as a JSON blob keyed
the way the sales team's inbox already expects.

No retry. Any failure raises FormSubmissionError and the caller shows
a generic error.
"""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from .config import settings
from .validation import redact

logger = logging.getLogger(__name__)

# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

# field_id -> key inside the message blob
MESSAGE_KEYS = {
    "name": "name",
    "email": "email",
    "whatsapp": "whatsapp",
    "has_land": "temPropriedade",
    "land_size": "metrosDaPropriedade",
    "neighborhood": "bairroDeConstrucao",
    "has_project": "temProjeto",
    "master_suite": "suiteMaster",
    "suite": "suite",
    "bedroom": "quarto",
    "living_room": "salaDeEstar",
    "office": "escritorio",
    "kitchen": "cozinha",
    "dining_room": "salaDeJantar",
    "powder_room": "lavabo",
    "home_theater": "home",
    "gourmet_area": "areaGourmet",
    "covered_garage": "garagemCoberta",
    "closet": "roupeiro",
    "storage_room": "deposito",
    "pool": "piscina",
    "finish_tier": "padraoDeAcabamento",
    "start_time": "tempoParaIniciarAObra",
    "available_budget": "orcamentoDisponivel",
    "payment_method": "formaDePagamento",
}

# estimate key -> key inside the message blob
ESTIMATE_KEYS = {
    "area_m2": "metragem",
    "prata": "prata",
    "ouro": "ouro",
    "diamante": "diamante",
}


class FormSubmissionError(Exception):
    """The form handler could not be reached or rejected the submission."""


def _to_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode(data: dict) -> str:
    """URL-encode a flat dict the way encodeURIComponent does, joined with '&'."""
    return "&".join(
        urllib.parse.quote(_to_text(key), safe=_URI_COMPONENT_SAFE)
        + "="
        + urllib.parse.quote(_to_text(value), safe=_URI_COMPONENT_SAFE)
        for key, value in data.items()
    )


def build_message(values: dict, estimate: dict) -> str:
    """
    JSON blob with every collected field plus the computed price tiers.

    Room counts are sent as strings; tiers as numbers.
    """
    message = {}
    for field_id, key in MESSAGE_KEYS.items():
        value = values.get(field_id, "")
        message[key] = value if isinstance(value, str) else str(value)
    for estimate_key, key in ESTIMATE_KEYS.items():
        message[key] = estimate.get(estimate_key, 0)
    return json.dumps(message, ensure_ascii=False, separators=(",", ":"))


def build_payload(values: dict, estimate: dict, form_name: Optional[str] = None) -> dict:
    """Top-level form fields for the handler. Insertion order is the wire order."""
    name = values.get("name", "")
    return {
        "form-name": form_name or settings.FORM_NAME,
        "nome": name,
        "name": name,
        "email": values.get("email", ""),
        "message": build_message(values, estimate),
    }


def submit_form(values: dict, estimate: dict,
                endpoint_url: Optional[str] = None,
                timeout: Optional[float] = None) -> int:
    """
    POST the lead to the form handler. Returns the HTTP status code.

    Raises FormSubmissionError on any transport failure or non-2xx response.
    """
    url = endpoint_url or settings.FORM_ENDPOINT_URL
    body = encode(build_payload(values, estimate)).encode("utf-8")

    try:
        req = urllib.request.Request(
            url,
            data=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=timeout or settings.FORM_TIMEOUT_SECONDS) as response:
            status = response.status
    except urllib.error.HTTPError as e:
        logger.warning("Form handler rejected lead %s: HTTP %s", redact(values.get("email", "")), e.code)
        raise FormSubmissionError(f"Form handler returned HTTP {e.code}") from e
    except (urllib.error.URLError, OSError) as e:
        logger.warning("Form handler unreachable at %s: %s", url, e)
        raise FormSubmissionError(f"Form handler unreachable: {e}") from e
    except (http.client.HTTPException, ValueError) as e:
        # Malformed response (BadStatusLine, IncompleteRead) or a bad endpoint URL
        logger.warning("Form handler request to %r failed: %r", url, e)
        raise FormSubmissionError(f"Form handler request failed: {e!r}") from e

    if status < 200 or status >= 300:
        raise FormSubmissionError(f"Form handler returned HTTP {status}")

    logger.info("Lead %s submitted (%s m²)", redact(values.get("email", "")), estimate.get("area_m2"))
    return status
