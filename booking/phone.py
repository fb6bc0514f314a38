import re

# "+" then country code then subscriber number
PHONE_RE = re.compile(r"^\+[1-9]\d{0,3}\d{6,15}$")

# Dial prefixes offered by the booking form's country picker
COUNTRY_PREFIXES = {
    "ES": "+34", "FR": "+33", "GB": "+44", "DE": "+49", "IT": "+39",
    "PT": "+351", "NL": "+31", "BE": "+32", "CH": "+41", "AT": "+43",
    "SE": "+46", "NO": "+47", "DK": "+45", "FI": "+358", "PL": "+48",
    "CZ": "+420", "HU": "+36", "GR": "+30", "IE": "+353", "RO": "+40",
    "HR": "+385", "BG": "+359", "SK": "+421", "SI": "+386", "LT": "+370",
    "LV": "+371", "EE": "+372",
    "US": "+1", "CA": "+1", "MX": "+52",
    "BR": "+55", "AR": "+54", "CL": "+56", "CO": "+57", "PE": "+51",
    "VE": "+58", "EC": "+593", "UY": "+598", "PY": "+595", "BO": "+591",
    "CN": "+86", "JP": "+81", "KR": "+82", "IN": "+91", "ID": "+62",
    "TH": "+66", "VN": "+84", "PH": "+63", "MY": "+60", "SG": "+65",
    "HK": "+852", "TW": "+886", "AE": "+971", "SA": "+966", "IL": "+972",
    "TR": "+90", "PK": "+92", "BD": "+880", "LK": "+94",
    "MA": "+212", "DZ": "+213", "TN": "+216", "EG": "+20", "ZA": "+27",
    "NG": "+234", "KE": "+254", "AU": "+61", "NZ": "+64",
}


def prefix_for_country(country_code):
    """'ES' -> '+34'; None for unknown codes."""
    if not country_code:
        return None
    return COUNTRY_PREFIXES.get(country_code.strip().upper())


def is_valid_phone(phone: str) -> bool:
    return bool(phone) and bool(PHONE_RE.match(phone))


def normalize_phone(raw: str, country_prefix: str = None) -> str:
    """
    Normalize user input to '+<countrycode><number>'.

    Spaces, dashes, dots and parentheses are dropped. A leading '00' is the
    international prefix. Numbers typed without one get ``country_prefix``
    with the national trunk '0' removed. Raises ValueError when the result
    is not a plausible international number.
    """
    if not raw:
        raise ValueError("Phone number is required")

    phone = re.sub(r"[\s\-\.\(\)]", "", raw.strip())

    if phone.startswith("00"):
        phone = "+" + phone[2:]

    if not phone.startswith("+"):
        if not country_prefix:
            raise ValueError("Phone number must include a country code")
        prefix = country_prefix if country_prefix.startswith("+") else "+" + country_prefix
        phone = prefix + phone.lstrip("0")

    if not is_valid_phone(phone):
        raise ValueError("Please enter a valid phone number")
    return phone
