"""
Activation — derived readiness flag of a store.

    await evaluate_activation(store.id, repo)

Runs after every store, product or payment-configuration change; request
handlers never write the flags themselves.
"""

from sellum.domain import ActivationStep, ActivationSteps
from sellum.activation._checks import (
    TITLE_LENGTH,
    DESCRIPTION_LENGTH,
    TAG_COUNT,
    profile_complete,
    shipping_registered,
    payment_method_registered,
)
from sellum.activation._nodes import (
    ActivationSubject,
    StoreNode,
    ProfileCompleteNode,
    MinOneProductNode,
    ShippingRegisteredNode,
    PaymentMethodRegisteredNode,
    ActivationNode,
    evaluate_activation,
)

__all__ = (
    "ActivationStep",
    "ActivationSteps",
    "TITLE_LENGTH",
    "DESCRIPTION_LENGTH",
    "TAG_COUNT",
    "profile_complete",
    "shipping_registered",
    "payment_method_registered",
    "ActivationSubject",
    "StoreNode",
    "ProfileCompleteNode",
    "MinOneProductNode",
    "ShippingRegisteredNode",
    "PaymentMethodRegisteredNode",
    "ActivationNode",
    "evaluate_activation",
)
