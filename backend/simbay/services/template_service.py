# backend/simbay/services/template_service.py
"""
Template rendering service for SimBay.

Renders the Jinja2 email templates shipped in ``simbay/templates``.
"""

from datetime import datetime
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..utils.time_utils import to_facility_time

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService:
    """Centralized template rendering service using Jinja2."""

    def __init__(self, template_dir: Optional[Path] = None):
        template_dir = template_dir or TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=True,  # Enable autoescaping for security
            trim_blocks=True,  # Remove trailing newlines from blocks
            lstrip_blocks=True,  # Remove leading whitespace from blocks
        )
        self._register_custom_filters()
        logger.debug(f"Template service initialized with template directory: {template_dir}")

    def _register_custom_filters(self) -> None:
        """Register custom Jinja2 filters."""

        def format_date(value: datetime, format_str: str = "%A, %B %d, %Y") -> str:
            if isinstance(value, str):
                return value  # Already formatted
            return to_facility_time(value).strftime(format_str)

        def format_time(value: datetime, format_str: str = "%I:%M %p") -> str:
            if isinstance(value, str):
                return value
            return to_facility_time(value).strftime(format_str).lstrip("0")

        self.env.filters["format_date"] = format_date
        self.env.filters["format_time"] = format_time

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "facility_timezone": settings.facility_timezone,
        }

    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Render a template with the common context merged in.

        Raises:
            jinja2.TemplateNotFound: If the template does not exist
        """
        full_context = {**self.get_common_context(), **(context or {})}
        template = self.env.get_template(template_name)
        return template.render(**full_context)
