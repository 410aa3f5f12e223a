"""Known insurance carriers and the substrings that identify them.

Entries are checked in order against lowercase, whitespace-collapsed card
text, so carriers that co-brand with a larger network (Anthem is a Blue
Cross Blue Shield licensee) must come before the network itself.
"""

INSURANCE_PROVIDERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Aetna", ("aetna",)),
    ("Anthem", ("anthem",)),
    (
        "Blue Cross Blue Shield",
        ("blue cross", "blue shield", "bcbs", "bluecross", "blueshield"),
    ),
    ("Cigna", ("cigna",)),
    ("United Healthcare", ("united", "unitedhealthcare", "uhc", "optum")),
    ("Humana", ("humana",)),
    ("Kaiser Permanente", ("kaiser", "permanente")),
    ("Molina Healthcare", ("molina",)),
    ("Centene", ("centene", "wellcare", "ambetter")),
    ("CVS Health / Aetna", ("cvs health",)),
    ("Health Care Service Corporation", ("hcsc",)),
    ("Highmark", ("highmark",)),
    ("GuideWell / Florida Blue", ("guidewell", "florida blue")),
    ("Independence Health Group", ("independence",)),
    ("Oscar Health", ("oscar",)),
    ("Clover Health", ("clover",)),
    ("Bright Health", ("bright health",)),
    ("Devoted Health", ("devoted",)),
    ("Medicare", ("medicare", "cms")),
    ("Medicaid", ("medicaid",)),
    ("Tricare", ("tricare",)),
)


def provider_names() -> list[str]:
    """Return the canonical carrier names in match order."""
    return [name for name, _ in INSURANCE_PROVIDERS]
