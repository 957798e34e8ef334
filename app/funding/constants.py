from enum import Enum


class FundingSource(str, Enum):
    PAYPAL = "paypal"
    VENMO = "venmo"
    ITAU = "itau"
    CREDIT = "credit"
    PAYLATER = "paylater"
    CARD = "card"
    IDEAL = "ideal"
    SEPA = "sepa"
    BANCONTACT = "bancontact"
    GIROPAY = "giropay"
    SOFORT = "sofort"
    EPS = "eps"
    MYBANK = "mybank"
    P24 = "p24"
    BLIK = "blik"
    TRUSTLY = "trustly"
    OXXO = "oxxo"
    BOLETO = "boleto"
    WECHATPAY = "wechatpay"
    PAYU = "payu"
    SATISPAY = "satispay"
    PAIDY = "paidy"
    APPLEPAY = "applepay"


VALID_FUNDING_SOURCES = frozenset(f.value for f in FundingSource)

# Query params consumed by the remember-funding iframe
QP_DOMAIN = "domain"
QP_FUNDING_SOURCES = "fundingSources"
QP_SDK_META = "sdkMeta"
QP_CLIENT_ID = "clientID"

# Response header names (canonical)
HDR_CONTENT_SECURITY_POLICY = "Content-Security-Policy"
HDR_ACCESS_CONTROL_ALLOW_ORIGIN = "Access-Control-Allow-Origin"

# Value written to a legacy single-purpose cookie when a source is remembered
LEGACY_COOKIE_VALUE = "1"

# Bumped when the structured cookie layout changes incompatibly
SDK_COOKIE_VERSION = 1
