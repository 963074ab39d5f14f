"""Advisory collaborator backed by the Gemini API.

Two coroutines are exposed:

* ``get_advice`` answers a free-text question about the transaction history
  and always returns a displayable string;
* ``parse_transaction`` turns a sentence such as "Dépensé 2000 DA pour le
  déjeuner" into a ``TransactionDraft`` or ``None``.

Neither call retries. A missing API key short-circuits before any network
traffic. Errors are logged and turned into the fallback values; callers who
need the reason use ``advise`` / ``parse``, which return an ``Either``.

Both are plain coroutines, so cancelling the task that awaits them cancels
the request.
"""
import json
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from google import genai
from google.genai import types

from nova.config import DEFAULT_MODEL
from nova.defaults import DEFAULT_CATEGORIES
from nova.domain import CategoryRegistry, Transaction, TransactionDraft
from nova.functional import Either, Left, Right, validate_draft

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "La clé API est manquante. Veuillez la configurer."
NO_ADVICE_MESSAGE = "Je n'ai pas pu générer de conseil pour le moment."
ERROR_MESSAGE = (
    "J'ai rencontré une erreur lors de l'analyse de vos finances. "
    "Veuillez réessayer plus tard."
)

ADVICE_PROMPT = """
Tu es Nova, un expert et conseiller financier IA.
Analyse l'historique des transactions suivant (en Dinars Algériens DA) et réponds à la question de l'utilisateur en FRANÇAIS.
Sois concis, amical et adopte un ton futuriste. Utilise les emojis avec parcimonie.

Historique des Transactions:
{history}

Question de l'utilisateur:
{question}
"""

PARSE_PROMPT = """Parse ce texte financier en français en un objet JSON avec les clés : 'amount' (number), 'description' (string), 'type' (enum: 'income' ou 'expense'), 'category' (string).
La date actuelle est {now}.
Les catégories de revenus valides sont : {income}.
Les catégories de dépenses valides sont : {expense}.
Essaie de faire correspondre la catégorie au mieux.

Entrée : "{text}"
"""

DRAFT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "amount": types.Schema(type=types.Type.NUMBER),
        "description": types.Schema(type=types.Type.STRING),
        "type": types.Schema(type=types.Type.STRING, enum=["income", "expense"]),
        "category": types.Schema(type=types.Type.STRING),
    },
    required=["amount", "description", "type", "category"],
)


def format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def summarize_transaction(t: Transaction) -> str:
    kind = "REVENU" if t.is_income else "DÉPENSE"
    return f"{t.date.date().isoformat()}: {kind} - {format_amount(t.amount)} DA ({t.category}) - {t.description}"


def summarize_transactions(transactions: Iterable[Transaction]) -> str:
    return "\n".join(summarize_transaction(t) for t in transactions)


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


class AdvisoryClient:

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Optional[Any] = None):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _missing_key(self) -> Optional[Left]:
        if self.api_key:
            return None
        logger.warning("Advisor called without an API key")
        return Left({"error": "missing_credential", "message": MISSING_KEY_MESSAGE})

    async def advise(self, transactions: Iterable[Transaction], question: str) -> Either[dict, str]:
        missing = self._missing_key()
        if missing is not None:
            return missing

        prompt = ADVICE_PROMPT.format(history=summarize_transactions(transactions), question=question)
        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            logger.exception("Advisor request failed")
            return Left({"error": "transport", "message": str(e)})

        if not response.text:
            return Left({"error": "empty_response", "message": NO_ADVICE_MESSAGE})
        return Right(response.text)

    async def get_advice(self, transactions: Iterable[Transaction], question: str) -> str:
        result = await self.advise(transactions, question)
        if result.is_right():
            return result.get_or_else(NO_ADVICE_MESSAGE)

        error = result.get_error()
        if error["error"] == "missing_credential":
            return MISSING_KEY_MESSAGE
        if error["error"] == "empty_response":
            return NO_ADVICE_MESSAGE
        return ERROR_MESSAGE

    async def parse(
        self,
        text: str,
        categories: CategoryRegistry = DEFAULT_CATEGORIES,
        now: Optional[datetime] = None,
    ) -> Either[dict, TransactionDraft]:
        missing = self._missing_key()
        if missing is not None:
            return missing

        prompt = PARSE_PROMPT.format(
            now=(now or datetime.now()).isoformat(),
            income=", ".join(categories.income),
            expense=", ".join(categories.expense),
            text=text,
        )
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=DRAFT_SCHEMA,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except Exception as e:
            logger.exception("Parser request failed")
            return Left({"error": "transport", "message": str(e)})

        if not response.text:
            return Left({"error": "empty_response", "message": "Empty parser response"})

        try:
            payload = json.loads(strip_code_fences(response.text))
        except json.JSONDecodeError as e:
            logger.warning("Parser returned invalid JSON: %s", e)
            return Left({"error": "invalid_json", "message": str(e)})

        result = validate_draft(payload)
        if result.is_left():
            logger.warning("Parser answer rejected: %s", result.get_error()["message"])
        return result

    async def parse_transaction(
        self,
        text: str,
        categories: CategoryRegistry = DEFAULT_CATEGORIES,
        now: Optional[datetime] = None,
    ) -> Optional[TransactionDraft]:
        result = await self.parse(text, categories, now)
        return result.get_or_else(None)
