from datetime import date, timedelta
from loguru import logger
from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError
from .attachments import Attachment, TextAttachment
from .invoice_types import ExtractedInvoice, ExtractedLineItem, ExtractionResult
from ..core.config import Settings, settings as default_settings
from ..core.errors import ExtractionError

EXTRACTION_PROMPT = "Process this invoice"

TITLE_SYSTEM_PROMPT = """
    - you will generate a short title based on the first message a user begins a conversation with
    - ensure it is not more than 80 characters long
    - the title should be a summary of the user's message
    - do not use quotes or colons"""

MAX_TITLE_LENGTH = 80


def mock_extraction_result(today: date | None = None) -> ExtractionResult:
    """Canned extraction used when MOCK=true"""
    today = today or date.today()
    return ExtractionResult(
        invoice=ExtractedInvoice(
            customer_name="Example Customer",
            vendor_name="Example Vendor",
            invoice_number="INV-12345",
            invoice_date=today,
            due_date=today + timedelta(days=30),
            amount=999.99,
            line_items=[
                ExtractedLineItem(description="Example Item", quantity=1, unit_price=999.99, amount=999.99)
            ],
        ),
        is_invoice=True,
    )


class ExtractionService:
    """
    Classifies an uploaded document and extracts invoice fields with an LLM.

    Mock mode is fixed at construction: a mock service never builds or calls
    a client and always returns ``mock_extraction_result()``.
    """

    def __init__(self, config: Settings | None = None, client: AsyncOpenAI | None = None, mock: bool | None = None):
        self.config = config or default_settings
        self.mock = self.config.mock if mock is None else mock
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.llm_api_key or None,
                base_url=self.config.llm_base_url or None,
                # A failed call fails the request
                max_retries=0,
            )
        return self._client

    def model_for(self, attachment: Attachment) -> str:
        if isinstance(attachment, TextAttachment):
            return self.config.llm_text_model
        return self.config.llm_document_model

    async def extract(self, attachment: Attachment) -> ExtractionResult:
        if self.mock:
            logger.info("Returning mock invoice extraction", kind=attachment.kind)
            return mock_extraction_result()

        model = self.model_for(attachment)
        logger.info("Requesting invoice extraction", model=model, kind=attachment.kind)

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            attachment.to_content_part(),
                        ],
                    }
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "invoice_extraction",
                        "schema": ExtractionResult.model_json_schema(by_alias=True),
                    },
                },
            )
        except OpenAIError as e:
            logger.error(f"Invoice extraction call failed: {e}")
            raise ExtractionError(f"Invoice extraction failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("Invoice extraction returned no content")

        try:
            result = ExtractionResult.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Model output failed schema validation", errors=e.error_count())
            raise ExtractionError(f"Invoice extraction returned invalid output: {e}") from e

        logger.info(
            "Extracted invoice metadata",
            is_invoice=result.is_invoice,
            invoice_number=result.invoice.invoice_number if result.invoice else None,
            line_items=len(result.invoice.line_items) if result.invoice else 0,
        )
        return result

    async def generate_title(self, message: str) -> str:
        """Short conversation title from the user's first message"""
        if self.mock:
            return "mock title"

        try:
            response = await self.client.chat.completions.create(
                model=self.config.llm_title_model,
                messages=[
                    {"role": "system", "content": TITLE_SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
            )
        except OpenAIError as e:
            logger.error(f"Title generation failed: {e}")
            raise ExtractionError(f"Title generation failed: {e}") from e

        title = (response.choices[0].message.content or "") if response.choices else ""
        title = title.replace('"', "").replace("'", "").replace(":", "").strip()
        return title[:MAX_TITLE_LENGTH]


def get_extraction_service() -> ExtractionService:
    """FastAPI dependency; reads MOCK and model names from settings"""
    return ExtractionService(default_settings)
