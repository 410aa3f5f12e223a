"""Map a parsed card onto the editable insurance form.

The caller shows these values for confirmation before saving, so every
key is present even when the card did not yield a value.
"""

from cardscan.parsing.card_parser import ParsedInsuranceCard


def to_insurance_form(card: ParsedInsuranceCard) -> dict[str, object]:
    """Build the insurance form payload from a parsed card.

    The first phone number on the card becomes the provider phone.
    """
    return {
        "provider": {
            "name": card.provider.name,
            "phone": card.phone_numbers[0] if card.phone_numbers else "",
        },
        "memberId": card.member_id,
        "groupNumber": card.group_number,
        "plan": {"name": card.plan_name},
        "subscriberName": card.subscriber_name,
        "pharmacy": {
            "rxBin": card.rx_bin,
            "rxPcn": card.rx_pcn,
            "rxGroup": card.rx_group,
        },
    }
