from models import PaymentLookup, ProviderPaymentStatus, Verdict


def provider_status(raw_status) -> ProviderPaymentStatus:
    """Exact match against known provider states; anything else is UNRECOGNIZED"""
    return ProviderPaymentStatus(raw_status)


def classify(lookup: PaymentLookup) -> Verdict:
    """Only an explicit COMPLETED from the provider counts as paid"""
    if provider_status(lookup.status) is ProviderPaymentStatus.COMPLETED:
        return Verdict.COMPLETED
    return Verdict.NOT_COMPLETED
