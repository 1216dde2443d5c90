import dataclasses
import pytest

from ecomm.data import datacls
from ecomm.model import Money, Person


def test_datacls_optional():
    @datacls
    class Foo:
        x: int
        y: str | None

    foo = Foo(x=1)
    assert foo.y is None


def test_datacls_any_field_order():
    @datacls
    class Foo:
        x: int = 1
        y: str

    assert Foo(y="a") == Foo(x=1, y="a")


def test_datacls_default_factory():
    @datacls
    class Foo:
        x: list[int] = dataclasses.field(default_factory=list)

    a, b = Foo(), Foo()
    a.x.append(1)
    assert b.x == []


def test_datacls_missing_argument():
    @datacls
    class Foo:
        x: int
        y: int

    with pytest.raises(TypeError) as ei:
        Foo()
    assert "missing 2 required keyword-only arguments: 'x' and 'y'" in str(ei.value)


def test_datacls_unexpected_argument():
    @datacls
    class Foo:
        x: int | None

    with pytest.raises(TypeError):
        Foo(z=1)


def test_datacls_keyword_only():
    @datacls
    class Foo:
        x: int

    with pytest.raises(TypeError):
        Foo(1)


def test_datacls_post_init():
    @datacls
    class Foo:
        x: int

        def __post_init__(self):
            self.x *= 2

    assert Foo(x=2).x == 4


def test_money_valid():
    money = Money(currency_code="USD", units=-1, nanos=-750_000_000)
    assert money.units == -1


def test_money_nanos_range():
    with pytest.raises(ValueError):
        Money(currency_code="USD", nanos=1_000_000_000)


def test_money_sign_mismatch():
    with pytest.raises(ValueError):
        Money(currency_code="USD", units=1, nanos=-1)


def test_person_defaults():
    person = Person(family_name="Bloggs")
    assert person.given_name is None
