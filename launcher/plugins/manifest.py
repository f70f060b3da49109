"""Plugin descriptor model - describes a plugin's identity, routing pattern and executable."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Any:
    """Render non-string JSON values of display fields as text."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


# Display-only fields: any JSON value is accepted and shown as text
Text = Annotated[Optional[str], BeforeValidator(_as_text)]


class PluginDescriptor(BaseModel):
    """Plugin descriptor loaded from a ``*.json`` file in a plugin directory.

    Fields are only checked as far as JSON parsing goes. ``pattern`` and
    ``exec`` keep whatever JSON value the file holds; a missing or broken one
    still loads and is rejected when the plugin is started.
    """

    model_config = ConfigDict(frozen=True)

    name: Text = Field(default=None, description="Human-readable plugin name")
    description: Text = Field(default=None, description="Plugin description")
    pattern: Any = Field(
        default=None,
        description="Regular expression searched for anywhere in the query",
    )
    exec: Any = Field(
        default=None,
        description="Executable path, relative to the descriptor's directory",
    )
    icon: Text = Field(default=None, description="Icon identifier")


def read_descriptor(path: Path) -> Optional[PluginDescriptor]:
    """Load a plugin descriptor.

    Args:
        path: Path to the descriptor file

    Returns:
        PluginDescriptor if the file holds a JSON object, None otherwise
    """
    logger.debug(f"Found plugin descriptor at {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return PluginDescriptor.model_validate(data)

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
    except ValidationError as e:
        logger.error(f"Invalid descriptor in {path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {path}: {e}")

    return None
