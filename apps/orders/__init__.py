"""Orders app: checkout, order lifecycle, payment webhook and the unpaid order sweep."""
