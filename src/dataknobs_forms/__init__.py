"""Declarative form validation.

Register fields on a form, attach assertions and conditions to each, then
validate the whole form or revalidate single fields as their values
change:

- **Forms and fields**: ``Form``, ``build_form``, ``FieldBuilder``
- **Assertions**: reusable predicates with failure descriptions
- **Conditions**: gates deciding whether a field or assertion applies
- **Results**: ``ValidationResult`` and ``FieldError``
- **Sources**: protocols and in-memory implementations for field values
- **Factory**: forms built from YAML or dict configuration

Example:
    ```python
    from dataknobs_forms import InMemoryContainer, ValueEquals, build_form

    container = InMemoryContainer({"email": "", "subscribe": False})

    def configure(form):
        form.field("subscribe")
        form.field("email").conditional(ValueEquals("subscribe", True)).is_email()

    form = build_form(configure, container)
    assert form.validate().success
    ```
"""

from dataknobs_forms.assertions import (
    Assertion,
    AssertionBuilder,
    Bound,
    BoundKind,
    CheckedStateAssertion,
    ContainsAssertion,
    EmailAssertion,
    LengthAssertion,
    NotEmptyAssertion,
    NumberAssertion,
    PredicateAssertion,
    RegexAssertion,
    UriAssertion,
    UrlAssertion,
)
from dataknobs_forms.conditions import (
    Condition,
    ContextFlag,
    FieldValid,
    FormState,
    Predicate,
    ValueEquals,
)
from dataknobs_forms.exceptions import (
    ConfigurationError,
    FormsError,
    NotFoundError,
    UnavailableSourceError,
)
from dataknobs_forms.factory import (
    FormFactory,
    assertion_registry,
    form_factory,
    form_from_file,
    load_form_config,
    register_assertion,
)
from dataknobs_forms.field import Field, FieldBuilder
from dataknobs_forms.form import Form, build_form
from dataknobs_forms.live import Subscription
from dataknobs_forms.result import FieldError, ValidationResult
from dataknobs_forms.sources import (
    ChangeNotifier,
    Container,
    InMemoryContainer,
    InMemorySource,
    ValueSource,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Forms
    "Form",
    "build_form",
    "Field",
    "FieldBuilder",
    # Results
    "ValidationResult",
    "FieldError",
    # Assertions
    "Assertion",
    "AssertionBuilder",
    "Bound",
    "BoundKind",
    "NotEmptyAssertion",
    "LengthAssertion",
    "NumberAssertion",
    "ContainsAssertion",
    "RegexAssertion",
    "EmailAssertion",
    "UrlAssertion",
    "UriAssertion",
    "CheckedStateAssertion",
    "PredicateAssertion",
    # Conditions
    "Condition",
    "FormState",
    "Predicate",
    "FieldValid",
    "ValueEquals",
    "ContextFlag",
    # Sources
    "ValueSource",
    "ChangeNotifier",
    "Container",
    "InMemorySource",
    "InMemoryContainer",
    # Live mode
    "Subscription",
    # Factory
    "FormFactory",
    "form_factory",
    "assertion_registry",
    "register_assertion",
    "load_form_config",
    "form_from_file",
    # Exceptions
    "FormsError",
    "ConfigurationError",
    "NotFoundError",
    "UnavailableSourceError",
]
