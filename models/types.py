from decimal import Decimal, ROUND_HALF_EVEN
from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_PRECISION = 20
MONEY_SCALE = 6
MONEY_QUANT = Decimal(1).scaleb(-MONEY_SCALE)
# Largest magnitude a NUMERIC(20, 6) column can hold
MONEY_MAX = Decimal(10) ** (MONEY_PRECISION - MONEY_SCALE) - MONEY_QUANT


class Money(TypeDecorator):
	"""Fixed-point money column.

	NUMERIC(20, 6) on backends with a real decimal type. SQLite has none (its
	NUMERIC is a double), so there the value is stored as its exact decimal text.
	"""
	impl = Numeric
	cache_ok = True

	def load_dialect_impl(self, dialect):
		if dialect.name == "sqlite":
			return dialect.type_descriptor(String(32))
		return dialect.type_descriptor(Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True))

	def process_bind_param(self, value, dialect):
		if value is None:
			return None
		value = Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_EVEN)
		if dialect.name == "sqlite":
			return format(value, "f")
		return value

	def process_result_value(self, value, dialect):
		if value is None:
			return None
		return Decimal(value)
