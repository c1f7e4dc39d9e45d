def has_discount(base_price: float, effective_price: float) -> bool:
    """True only when the effective price is cheaper than the base"""
    return effective_price < base_price


def discount_percentage(base_price: float, effective_price: float) -> int:
    """Whole-percent saving shown on departure badges"""
    if not has_discount(base_price, effective_price) or base_price <= 0:
        return 0
    return round((base_price - effective_price) / base_price * 100)
