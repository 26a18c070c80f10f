# Utility modules for the menu costing app
from .sanitizer import sanitize_text, sanitize_name
from .forms import FormError, parse_float, parse_int
