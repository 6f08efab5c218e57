from mailkit.email.render.simple_template import render, template_fields
from mailkit.email.render.text_layout import format_message

__all__ = ["render", "template_fields", "format_message"]
