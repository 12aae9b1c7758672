"""
Supplier product pricing - derives stored price fields from form input

Pricing models:
- "Per Purchase Unit": price and base units per purchase unit entered directly
- "Per Base Unit": price per base unit; with variants, per-variant purchase
  quantities and prices are derived (rounded to two decimals)

Form revisions disagree on whether fields that do not apply are stored as 0
or as null. SupplierPricingPolicy makes both choices explicit.
"""
from dataclasses import dataclass
import math
from typing import Any, Dict, List, Mapping, Optional

PER_PURCHASE_UNIT = "Per Purchase Unit"
PER_BASE_UNIT = "Per Base Unit"
PRICING_MODELS = (PER_PURCHASE_UNIT, PER_BASE_UNIT)


@dataclass(frozen=True)
class SupplierPricingPolicy:
    """
    Attributes:
        missing_variant_value: stored for pricePerPurchaseUnit /
            baseUnitsPerPurchaseUnit when variants are enabled but none is complete
        inapplicable_value: stored for price fields the chosen pricing model
            does not use (no variants)
    """

    missing_variant_value: Optional[float] = 0
    inapplicable_value: Optional[float] = None


# Behaviour of the current product form
DEFAULT_PRICING_POLICY = SupplierPricingPolicy()
# Older form revision: zero everywhere
ZERO_FILL_PRICING_POLICY = SupplierPricingPolicy(missing_variant_value=0, inapplicable_value=0)
# Null everywhere
NULL_FILL_PRICING_POLICY = SupplierPricingPolicy(missing_variant_value=None, inapplicable_value=None)

# Deployment names, selected by the SUPPLIER_PRICING_POLICY setting
PRICING_POLICIES: Dict[str, SupplierPricingPolicy] = {
    "default": DEFAULT_PRICING_POLICY,
    "zero": ZERO_FILL_PRICING_POLICY,
    "null": NULL_FILL_PRICING_POLICY,
}


def get_pricing_policy(name: Optional[str]) -> SupplierPricingPolicy:
    """
    Policy by deployment name; empty selects the default

    Raises:
        ValueError: unknown name
    """
    key = (name or "default").strip().lower()
    if key not in PRICING_POLICIES:
        raise ValueError(f"Unknown supplier pricing policy: {name}")
    return PRICING_POLICIES[key]


def round_to_two(value: float) -> float:
    """Half-up rounding to cents"""
    return math.floor(value * 100 + 0.5) / 100


def _number(value: Any) -> float:
    """Form number: empty or invalid input counts as 0"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return number if math.isfinite(number) else 0


def compute_variants(variants: List[Mapping[str, Any]], price_per_base_unit: Any) -> List[Dict[str, Any]]:
    """
    Derive purchase quantities and prices for each variant

    Returns every variant with an ``isComplete`` flag (perBaseUnit and packages > 0).
    """
    base_price = _number(price_per_base_unit)
    computed = []
    for variant in variants or []:
        per_base_unit = _number(variant.get("perBaseUnit"))
        packages = _number(variant.get("packages"))
        base_units = round_to_two(per_base_unit * packages)
        computed.append({
            "perBaseUnit": per_base_unit,
            "packages": packages,
            "baseUnitsPerPurchaseUnit": base_units,
            "pricePerPurchaseUnit": round_to_two(base_price * base_units),
            "isComplete": per_base_unit > 0 and packages > 0,
        })
    return computed


def build_supplier_product_payload(
    form: Mapping[str, Any],
    policy: SupplierPricingPolicy = DEFAULT_PRICING_POLICY,
) -> Dict[str, Any]:
    """
    Build the stored supplier product fields from raw form input

    Args:
        form: supplierId, supplierSku, nameAtSupplier, currency, pricingModel,
            pricePerBaseUnit, pricePerPurchaseUnit, purchaseUnit, baseUnit,
            baseUnitsPerPurchaseUnit, catalogProductId, active, hasVariants, variants
        policy: null-vs-zero choice for missing / inapplicable price fields
    """
    pricing_model = form.get("pricingModel") or PER_PURCHASE_UNIT
    if pricing_model not in PRICING_MODELS:
        raise ValueError(f"Unknown pricing model: {pricing_model}")

    has_variants = bool(form.get("hasVariants"))
    is_per_purchase_unit = pricing_model == PER_PURCHASE_UNIT

    complete = [v for v in compute_variants(form.get("variants") or [], form.get("pricePerBaseUnit")) if v["isComplete"]]
    first = complete[0] if complete else None

    if has_variants:
        price_per_base_unit = _number(form.get("pricePerBaseUnit"))
        price_per_purchase_unit = first["pricePerPurchaseUnit"] if first else policy.missing_variant_value
        base_units = first["baseUnitsPerPurchaseUnit"] if first else policy.missing_variant_value
    elif is_per_purchase_unit:
        price_per_base_unit = policy.inapplicable_value
        price_per_purchase_unit = _number(form.get("pricePerPurchaseUnit"))
        base_units = _number(form.get("baseUnitsPerPurchaseUnit"))
    else:
        price_per_base_unit = _number(form.get("pricePerBaseUnit"))
        price_per_purchase_unit = policy.inapplicable_value
        base_units = policy.inapplicable_value

    return {
        "supplierId": str(form.get("supplierId") or "").strip(),
        "supplierSku": str(form.get("supplierSku") or "").strip(),
        "nameAtSupplier": str(form.get("nameAtSupplier") or "").strip(),
        "currency": str(form.get("currency") or "").strip() or "EUR",
        "pricingModel": pricing_model,
        "purchaseUnit": str(form.get("purchaseUnit") or "").strip() if is_per_purchase_unit else "",
        "baseUnit": str(form.get("baseUnit") or "").strip(),
        "catalogProductId": str(form.get("catalogProductId") or "").strip(),
        "active": form.get("active") is not False,
        "hasVariants": has_variants,
        "pricePerBaseUnit": price_per_base_unit,
        "pricePerPurchaseUnit": price_per_purchase_unit,
        "baseUnitsPerPurchaseUnit": base_units,
        "variants": [
            {key: v[key] for key in ("perBaseUnit", "packages", "baseUnitsPerPurchaseUnit", "pricePerPurchaseUnit")}
            for v in complete
        ] if has_variants else [],
    }
