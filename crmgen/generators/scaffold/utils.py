"""Naming helpers shared by the scaffold renderers."""
import re


def to_snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1)
    return s2.lower()


def to_kebab_case(name: str) -> str:
    """Convert PascalCase or camelCase to kebab-case."""
    return to_snake_case(name).replace('_', '-')


def to_pascal_case(name: str) -> str:
    """Convert snake_case, camelCase or lowercase names to PascalCase."""
    parts = to_snake_case(name).split('_')
    return ''.join(p[:1].upper() + p[1:] for p in parts if p)


def pluralize(word: str) -> str:
    """Simple English pluralization."""
    if word.endswith('s') or word.endswith('x') or word.endswith('z') or word.endswith('ch') or word.endswith('sh'):
        return word + 'es'
    elif word.endswith('y') and len(word) > 1 and word[-2] not in 'aeiou':
        return word[:-1] + 'ies'
    else:
        return word + 's'


def model_slug(model_name: str) -> str:
    """Module-level identifier for a model: ``LeadNote`` -> ``lead_note``."""
    return to_snake_case(model_name)


def table_name(model_name: str) -> str:
    return pluralize(model_slug(model_name))


def route_prefix(model_name: str) -> str:
    """URL prefix for a model's router: ``LeadNote`` -> ``/lead-notes``."""
    return "/" + pluralize(to_kebab_case(model_name))


def model_path(model_name: str) -> str:
    return f"models/{model_slug(model_name)}_model.py"


def validation_path(model_name: str) -> str:
    return f"middlewares/{model_slug(model_name)}_validation.py"


def controller_path(model_name: str) -> str:
    return f"controllers/{model_slug(model_name)}_controller.py"


def routes_path(model_name: str) -> str:
    return f"routes/{model_slug(model_name)}_routes.py"
