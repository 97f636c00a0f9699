"""
Hypernative webhook envelope schema.

Hypernative signs only the ``data`` string, not the surrounding JSON
object, so ``data`` is kept exactly as received.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class HypernativeWebhook(BaseModel):
    """
    Outer JSON body of a Hypernative webhook call.

    Example body:
    ```json
    {
      "id": "...",
      "data": "{\"riskInsight\": {...}}",
      "digitalSignature": "MEUCIQ..."
    }
    ```
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    digital_signature: Optional[str] = Field(default=None, alias="digitalSignature")
    data: Any = None
