"""
OpenTDB client - the upstream question provider
"""
import httpx
import logging
from pydantic import ValidationError
from typing import Any, Dict, List, Optional

from mintquiz.config import Settings
from mintquiz.exceptions import UpstreamUnavailable
from mintquiz.schemas.quiz import TriviaItem, TriviaResponse

logger = logging.getLogger(__name__)


class TriviaService:
    """Fetches batches of multiple-choice questions from OpenTDB"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.transport = transport

    def build_params(self) -> Dict[str, Any]:
        """Query string for api.php"""
        return {
            "amount": self.settings.TRIVIA_AMOUNT,
            "category": self.settings.TRIVIA_CATEGORY,
            "difficulty": self.settings.TRIVIA_DIFFICULTY,
            "type": self.settings.TRIVIA_TYPE,
        }

    async def fetch_questions(self) -> List[TriviaItem]:
        """
        Fetch one batch of questions

        Returns:
            Validated trivia items, in provider order

        Raises:
            UpstreamUnavailable: on network errors, timeouts, non-2xx
                responses, a non-zero response_code or a malformed payload
        """
        logger.info("Fetching from OpenTDB...")
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.TRIVIA_TIMEOUT_SECONDS,
                transport=self.transport
            ) as client:
                response = await client.get(self.settings.TRIVIA_API_URL, params=self.build_params())
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Quiz fetch error: {str(e)}")
            raise UpstreamUnavailable("Failed to fetch quiz questions") from e
        except ValueError as e:
            logger.error(f"OpenTDB returned invalid JSON: {str(e)}")
            raise UpstreamUnavailable("Failed to fetch quiz questions") from e

        try:
            data = TriviaResponse.model_validate(payload)
        except ValidationError as e:
            logger.error(f"OpenTDB returned an unexpected payload: {str(e)}")
            raise UpstreamUnavailable("Failed to fetch quiz questions") from e

        if data.response_code != 0:
            logger.error(f"OpenTDB error: response_code {data.response_code}")
            raise UpstreamUnavailable("OpenTDB unavailable")

        logger.info(f"OpenTDB returned {len(data.results)} questions")
        return data.results
