"""
Email template utilities.

Templates are HTML files packaged with the Lambda under templates/ and
cached in memory for warm invocations.
"""

import html
import logging
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)

# src/services/templates.py -> src/templates/
# In Lambda: /var/task/templates/
TEMPLATES_DIR = Path(__file__).parent.parent / 'templates'

WELCOME_TEMPLATE = 'welcome_email.html'

# Module-level cache: {template_name: content}
_template_cache: Dict[str, str] = {}


def load_template(template_name: str, use_cache: bool = True) -> str:
    """
    Load an HTML template from the packaged templates directory.

    Args:
        template_name: Template file name (e.g., "welcome_email.html")
        use_cache: Use cached version if available (default: True)

    Returns:
        str: Template content

    Raises:
        ValueError: If the template file does not exist
    """
    if use_cache and template_name in _template_cache:
        return _template_cache[template_name]

    template_path = TEMPLATES_DIR / template_name
    try:
        with open(template_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        logger.error(f"Template not found: {template_path}")
        raise ValueError(f"Template '{template_name}' not found")

    logger.info(f"Loaded template {template_name}: {len(content)} characters")
    _template_cache[template_name] = content
    return content


def render_template(template: str, **variables) -> str:
    """
    Fill a template's {placeholders}.

    Values are HTML-escaped, quotes included, so they are safe inside
    attributes.

    Args:
        template: Template string with {variable} placeholders
        **variables: Values to substitute

    Returns:
        str: Rendered HTML

    Raises:
        ValueError: If the template references a variable not supplied

    Example:
        >>> render_template('<a href="{url}">go</a>', url='https://x/?a=1&b=2')
        '<a href="https://x/?a=1&amp;b=2">go</a>'
    """
    escaped = {
        key: html.escape(str(value), quote=True)
        for key, value in variables.items()
    }
    try:
        return template.format(**escaped)
    except KeyError as e:
        missing_var = str(e).strip("'")
        logger.error(f"Missing variable in template: {missing_var}")
        raise ValueError(f"Missing required variable in template: {missing_var}")


def render_welcome_email(validation_url: str, portal_url: str) -> str:
    """Render the welcome email with its validation and portal links."""
    template = load_template(WELCOME_TEMPLATE)
    return render_template(
        template,
        validation_url=validation_url,
        portal_url=portal_url
    )


def clear_cache() -> None:
    """Clear the template cache (used by tests)."""
    _template_cache.clear()
    logger.info("Template cache cleared")
