"""Module of value types shared by service records."""

from ecomm.data import datacls


@datacls
class Person:
    """A human individual."""

    id: str | None
    family_name: str | None
    given_name: str | None
    middle_name: str | None
    display_name: str | None
    display_name_last_first: str | None


@datacls
class Money:
    """
    An amount of money in a specific currency.

    Attributes:
    • currency_code: three-letter ISO 4217 currency code
    • units: whole units of the amount
    • nanos: number of nano (10^-9) units of the amount, between -999,999,999 and
      +999,999,999 inclusive, with the same sign as units if units is non-zero

    For example, $-1.75 is represented as units=-1 and nanos=-750000000.
    """

    currency_code: str | None
    units: int = 0
    nanos: int = 0

    def __post_init__(self):
        if not -999_999_999 <= self.nanos <= 999_999_999:
            raise ValueError("nanos out of range")
        if (self.units > 0 and self.nanos < 0) or (self.units < 0 and self.nanos > 0):
            raise ValueError("units and nanos must have the same sign")


@datacls
class PostalAddress:
    """A postal address, as used for delivery or payment."""

    region_code: str | None
    language_code: str | None
    postal_code: str | None
    sorting_code: str | None
    administrative_area: str | None
    locality: str | None
    sublocality: str | None
    address_lines: list[str] | None
    recipients: list[str] | None
    organization: str | None
    mailbox_id: str | None
