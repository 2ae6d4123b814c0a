"""Residential/commercial classification resolver.

The provider places the residential flag at different depths depending on
call mode, and sometimes omits it. ``classify`` walks an ordered list of
strategies and takes the first one that yields a boolean:

1. flag under the delivery verification details
2. flag at the payload root
3. residential-looking tokens in the street line
4. commercial

The last tier is a definite ``False`` because pricing needs a boolean.
Pure: no I/O, no clock, no randomness.
"""

import re
from typing import Callable

from src.services.models import (
    AddressRecord,
    Classification,
    ClassificationSource,
    DeliveryDetailResidential,
    TopLevelResidential,
    VerificationResult,
)

RESIDENTIAL_STREET_PATTERN = re.compile(
    r"(?:#\s*\w+"
    r"|\b(?:apt|apartment|unit|suite|ste|lot|trlr|trailer"
    r"|road|rd|lane|ln|drive|dr|court|ct|circle|cir"
    r"|terrace|ter|trail|trl|place|pl|way)\b)",
    re.IGNORECASE,
)

Strategy = Callable[[VerificationResult, AddressRecord], Classification | None]


def _from_delivery_detail(result: VerificationResult, address: AddressRecord) -> Classification | None:
    for signal in result.signals:
        if isinstance(signal, DeliveryDetailResidential):
            return Classification(signal.residential, ClassificationSource.PROVIDER_DETAIL)
    return None


def _from_top_level(result: VerificationResult, address: AddressRecord) -> Classification | None:
    for signal in result.signals:
        if isinstance(signal, TopLevelResidential):
            return Classification(signal.residential, ClassificationSource.PROVIDER_TOP_LEVEL)
    return None


def _from_street_pattern(result: VerificationResult, address: AddressRecord) -> Classification | None:
    if RESIDENTIAL_STREET_PATTERN.search(address.street1):
        return Classification(True, ClassificationSource.HEURISTIC_REGEX)
    return None


def _default(result: VerificationResult, address: AddressRecord) -> Classification:
    return Classification(False, ClassificationSource.DEFAULT)


STRATEGIES: tuple[Strategy, ...] = (
    _from_delivery_detail,
    _from_top_level,
    _from_street_pattern,
    _default,
)


def classify(result: VerificationResult, address: AddressRecord) -> Classification:
    """Resolve the residential flag for one verified address.

    Args:
        result: Provider answer (possibly without any residential signal).
        address: The normalized address that was verified.

    Returns:
        Classification from the first strategy that produced one.
    """
    for strategy in STRATEGIES:
        classification = strategy(result, address)
        if classification is not None:
            return classification
    # unreachable: _default always answers
    return Classification(False, ClassificationSource.DEFAULT)
