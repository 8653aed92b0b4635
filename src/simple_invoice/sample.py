"""Demo invoice options, with optional fake customer/seller data."""

import copy
from typing import Any, Dict, List, Optional

from faker import Faker


DEMO_OPTIONS: Dict[str, Any] = {
    "data": {
        "invoice": {
            "name": "Invoice",
            "header": [
                {"label": "Invoice Number", "value": 1},
                {"label": "Status", "value": "Paid"},
                {"label": "Date", "value": "22/10/21"},
            ],
            "currency": "EUR",
            "customer": [
                {
                    "label": "Bill To",
                    "value": [
                        "John Doe",
                        "Acme Corp",
                        "john.doe@gmail.com",
                        "+145453242342342",
                        "522 Main Street, New York",
                        "USA",
                    ],
                },
                {"label": "Tax Identifier", "value": "352352342333"},
                {"label": "Information", "value": "Deliver to the door"},
            ],
            "seller": [
                {
                    "label": "Bill From",
                    "value": [
                        "Big Corp",
                        "2 Flowers Streets, London",
                        "UK",
                        "+44245345435345",
                        "biling@bigcorp.com",
                    ],
                },
                {"label": "Tax Identifier", "value": "5345345345435345345"},
            ],
            "legal": [
                {
                    "value": "Lorem ipsum dolor sit amet, consectetur adipiscing elit",
                    "weight": "bold",
                    "color": "primary",
                },
                {
                    "value": "sed do eiusmod tempor incididunt ut labore et dolore magna.",
                    "weight": "bold",
                    "color": "secondary",
                },
            ],
            "details": {
                "header": [
                    {"value": "Description"},
                    {"value": "Quantity"},
                    {"value": "Subtotal"},
                ],
                "parts": [
                    [
                        {"value": "Nike Air Max"},
                        {"value": 1},
                        {"value": "53", "price": True},
                    ],
                    [
                        {"value": "Discount"},
                        {"value": 1},
                        {"value": "-10", "price": True},
                    ],
                ],
                "total": [
                    {"label": "Total without VAT", "value": "43", "price": True},
                    {"label": "VAT Rate", "value": "20%"},
                    {"label": "VAT Paid", "value": "8.6", "price": True},
                    {"label": "Total paid with VAT", "value": "51.6", "price": True},
                ],
            },
        },
    },
}


def fake_party(fake: Faker, label: str, with_contact_name: bool = True) -> List[Dict[str, Any]]:
    """Build a customer or seller block with a fake address."""
    lines = []
    if with_contact_name:
        lines.append(fake.name())
    lines.extend([
        fake.company(),
        fake.company_email(),
        fake.phone_number(),
        fake.street_address(),
        f"{fake.city()}, {fake.state_abbr()} {fake.postcode()}",
    ])
    return [
        {"label": label, "value": lines},
        {"label": "Tax Identifier", "value": fake.bothify("##########")},
    ]


def demo_options(fake_parties: bool = False, seed: Optional[int] = None) -> Dict[str, Any]:
    """
    Return the demo invoice options.

    With fake_parties, the customer and seller blocks are replaced by Faker
    data; seed makes them reproducible.
    """
    options = copy.deepcopy(DEMO_OPTIONS)
    if not fake_parties:
        return options

    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)

    invoice = options["data"]["invoice"]
    invoice["customer"] = fake_party(fake, "Bill To")
    invoice["seller"] = fake_party(fake, "Bill From", with_contact_name=False)
    invoice["header"][0]["value"] = int(fake.numerify("####"))
    invoice["header"][2]["value"] = fake.date(pattern="%d/%m/%y")
    return options
