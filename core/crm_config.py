from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings


@dataclass(frozen=True)
class CompanyInfo:
    name: str = "Your Company Name"
    legal_name: str = "Your Company Legal Name GmbH"
    address_line_1: str = ""
    address_line_2: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = "Germany"
    email: str = "info@example.com"
    phone: str = ""
    website: str = ""


@dataclass(frozen=True)
class TaxSettings:
    tax_number: str = ""
    vat_id: str = ""
    # Percentages, e.g. 19.0 for 19 %
    default_rate: Decimal = Decimal("19.0")
    reduced_rate: Decimal = Decimal("7.0")


@dataclass(frozen=True)
class BankDetails:
    name: str = ""
    account_holder: str = ""
    iban: str = ""
    bic: str = ""


@dataclass(frozen=True)
class InvoiceSettings:
    number_prefix: str = "INV"
    number_padding: int = 4
    default_payment_terms: int = 30
    payment_terms_text: str = "Zahlbar innerhalb von :days Tagen netto ohne Abzug."
    footer_text: str = ""


@dataclass(frozen=True)
class QuoteSettings:
    number_prefix: str = "Q"
    number_padding: int = 4
    default_validity_days: int = 30
    footer_text: str = ""
    recalculate_on_item_delete: bool = True


def _section(section, key: Optional[str]) -> Any:
    data = asdict(section)
    if key is None:
        return data
    return data.get(key)


@dataclass(frozen=True)
class CrmConfig:
    """
    Business configuration handed explicitly to the money and numbering
    helpers. Build it from Django settings with ``CrmConfig.from_settings()``.
    """

    company_info: CompanyInfo = field(default_factory=CompanyInfo)
    tax: TaxSettings = field(default_factory=TaxSettings)
    bank: BankDetails = field(default_factory=BankDetails)
    invoice: InvoiceSettings = field(default_factory=InvoiceSettings)
    quote: QuoteSettings = field(default_factory=QuoteSettings)
    locale: str = "de_DE"
    currency: str = "EUR"
    currency_symbol: str = "€"

    # -----------------------------
    # Section accessors
    # -----------------------------
    def company(self, key: Optional[str] = None) -> Any:
        return _section(self.company_info, key)

    def tax_settings(self, key: Optional[str] = None) -> Any:
        return _section(self.tax, key)

    def bank_details(self, key: Optional[str] = None) -> Any:
        return _section(self.bank, key)

    def invoice_settings(self, key: Optional[str] = None) -> Any:
        return _section(self.invoice, key)

    def quote_settings(self, key: Optional[str] = None) -> Any:
        return _section(self.quote, key)

    # -----------------------------
    # Tax rates
    # -----------------------------
    @property
    def default_tax_rate(self) -> Decimal:
        return Decimal(self.tax.default_rate)

    @property
    def reduced_tax_rate(self) -> Decimal:
        return Decimal(self.tax.reduced_rate)

    @property
    def default_tax_multiplier(self) -> Decimal:
        """0.19 for 19 %."""
        return self.default_tax_rate / Decimal("100")

    @property
    def reduced_tax_multiplier(self) -> Decimal:
        return self.reduced_tax_rate / Decimal("100")

    @classmethod
    def from_settings(cls, source=None) -> "CrmConfig":
        s = source or settings

        def get(name, default):
            return getattr(s, name, default)

        return cls(
            company_info=CompanyInfo(
                name=get("CRM_COMPANY_NAME", CompanyInfo.name),
                legal_name=get("CRM_COMPANY_LEGAL_NAME", CompanyInfo.legal_name),
                address_line_1=get("CRM_COMPANY_ADDRESS_LINE_1", ""),
                address_line_2=get("CRM_COMPANY_ADDRESS_LINE_2", ""),
                postal_code=get("CRM_COMPANY_POSTAL_CODE", ""),
                city=get("CRM_COMPANY_CITY", ""),
                country=get("CRM_COMPANY_COUNTRY", CompanyInfo.country),
                email=get("CRM_COMPANY_EMAIL", CompanyInfo.email),
                phone=get("CRM_COMPANY_PHONE", ""),
                website=get("CRM_COMPANY_WEBSITE", ""),
            ),
            tax=TaxSettings(
                tax_number=get("CRM_TAX_NUMBER", ""),
                vat_id=get("CRM_VAT_ID", ""),
                default_rate=Decimal(
                    str(get("CRM_TAX_DEFAULT_RATE", TaxSettings.default_rate))
                ),
                reduced_rate=Decimal(
                    str(get("CRM_TAX_REDUCED_RATE", TaxSettings.reduced_rate))
                ),
            ),
            bank=BankDetails(
                name=get("CRM_BANK_NAME", ""),
                account_holder=get("CRM_BANK_ACCOUNT_HOLDER", ""),
                iban=get("CRM_BANK_IBAN", ""),
                bic=get("CRM_BANK_BIC", ""),
            ),
            invoice=InvoiceSettings(
                number_prefix=get(
                    "CRM_INVOICE_NUMBER_PREFIX", InvoiceSettings.number_prefix
                ),
                number_padding=int(
                    get("CRM_INVOICE_NUMBER_PADDING", InvoiceSettings.number_padding)
                ),
                default_payment_terms=int(
                    get(
                        "CRM_INVOICE_PAYMENT_TERMS",
                        InvoiceSettings.default_payment_terms,
                    )
                ),
                payment_terms_text=get(
                    "CRM_INVOICE_PAYMENT_TERMS_TEXT",
                    InvoiceSettings.payment_terms_text,
                ),
                footer_text=get("CRM_INVOICE_FOOTER_TEXT", ""),
            ),
            quote=QuoteSettings(
                number_prefix=get(
                    "CRM_QUOTE_NUMBER_PREFIX", QuoteSettings.number_prefix
                ),
                number_padding=int(
                    get("CRM_QUOTE_NUMBER_PADDING", QuoteSettings.number_padding)
                ),
                default_validity_days=int(
                    get(
                        "CRM_QUOTE_VALIDITY_DAYS",
                        QuoteSettings.default_validity_days,
                    )
                ),
                footer_text=get("CRM_QUOTE_FOOTER_TEXT", ""),
                recalculate_on_item_delete=bool(
                    get("CRM_RECALCULATE_ON_ITEM_DELETE", True)
                ),
            ),
            locale=get("CRM_LOCALE", "de_DE"),
            currency=get("CRM_CURRENCY", "EUR"),
            currency_symbol=get("CRM_CURRENCY_SYMBOL", "€"),
        )


def get_crm_config() -> CrmConfig:
    """Snapshot of the CRM_* settings, for entry points (admin, tasks, commands)."""
    return CrmConfig.from_settings()
