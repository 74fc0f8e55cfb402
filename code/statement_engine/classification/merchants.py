"""
merchants.py

Merchant canonicalization: noisy narration -> (canonical merchant, default
category, base confidence).

Matching discipline (first pass that hits wins, table order breaks ties):
1) Key match: the entry key as a whole word/phrase.
2) Alias match: aliases of <= 4 chars need exact token equality or a
   whitespace/dash boundary (so EL never fires inside MICHELLE); longer
   aliases may match as substrings (glued text like ZOMATOLTD).
3) Fuzzy: a token of >= 5 chars that is a prefix of a key (or the key a
   prefix of it), for keys of >= 5 chars only. Fuzzy hits are reported with
   reduced confidence and do not fix the category on their own.

Table rules:
- More specific entries first (Amazon Prime Video before Amazon,
  Swiggy Instamart before Swiggy).
- Dairy and milk shops are Groceries, never Dining.
- Crypto exchanges are keyed by the legal entity names that show up on
  statements (ZANMAI LABS -> WazirX).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models import Category


# ======================================================
# CANONICAL TABLE
# ======================================================

@dataclass(frozen=True)
class MerchantEntry:
    key: str
    name: str
    category: Category
    confidence: float
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantMatch:
    name: str
    category: Category
    confidence: float
    alias: str
    match_type: str


C = Category

MERCHANT_TABLE: List[MerchantEntry] = [
    # Entertainment / streaming (before e-commerce: AMAZON PRIME must not land in Shopping)
    MerchantEntry("AMAZON PRIME", "Amazon Prime Video", C.ENTERTAINMENT, 0.9, ("PRIMEVIDEO", "PRIME VIDEO")),
    MerchantEntry("NETFLIX", "Netflix", C.ENTERTAINMENT, 0.9),
    MerchantEntry("HOTSTAR", "Disney+ Hotstar", C.ENTERTAINMENT, 0.9, ("DISNEY", "NOVI DIGITAL")),
    MerchantEntry("SPOTIFY", "Spotify", C.ENTERTAINMENT, 0.9),
    MerchantEntry("ZEE5", "Zee5", C.ENTERTAINMENT, 0.85, ("ZEE ENTERTAINMENT",)),
    MerchantEntry("SONYLIV", "SonyLIV", C.ENTERTAINMENT, 0.85, ("SONY LIV",)),
    MerchantEntry("BOOKMYSHOW", "BookMyShow", C.ENTERTAINMENT, 0.85, ("BIGTREE ENTERTAINMENT",)),
    MerchantEntry("PVR", "PVR INOX", C.ENTERTAINMENT, 0.85, ("INOX",)),
    MerchantEntry("YOUTUBE", "YouTube Premium", C.ENTERTAINMENT, 0.8, ("GOOGLE YOUTUBE",)),
    MerchantEntry("GOOGLE PLAY", "Google Play", C.ENTERTAINMENT, 0.8, ("GOOGLEPLAY",)),

    # Groceries (before food delivery: INSTAMART is a grocery order)
    MerchantEntry("INSTAMART", "Swiggy Instamart", C.GROCERIES, 0.9, ("SWIGGY INSTAMART",)),
    MerchantEntry("BIGBASKET", "BigBasket", C.GROCERIES, 0.9, ("BIG BASKET", "SUPERMARKET GROCERY SUPPLIES", "INNOVATIVE RETAIL")),
    MerchantEntry("BLINKIT", "Blinkit", C.GROCERIES, 0.9, ("GROFERS", "BLINK COMMERCE")),
    MerchantEntry("ZEPTO", "Zepto", C.GROCERIES, 0.9, ("KIRANAKART",)),
    MerchantEntry("JIOMART", "JioMart", C.GROCERIES, 0.85, ("JIO MART",)),
    MerchantEntry("DMART", "DMart", C.GROCERIES, 0.85, ("AVENUE SUPERMARTS", "D MART")),
    MerchantEntry("BIG BAZAAR", "Big Bazaar", C.GROCERIES, 0.85, ("BIGBAZAAR",)),
    MerchantEntry("COUNTRY DELIGHT", "Country Delight", C.GROCERIES, 0.85, ("COUNTRYDELIGHT",)),
    MerchantEntry("DAIRY", "Dairy", C.GROCERIES, 0.85, ("DAIRY FARM", "DUGDHALAYA")),
    MerchantEntry("MILK SHOP", "Milk Shop", C.GROCERIES, 0.8, ("DOODH", "MILK CENTRE", "MILK")),

    # Food delivery
    MerchantEntry("ZOMATO", "Zomato", C.FOOD_DELIVERY, 0.9, ("ZMT", "ZOMATO LTD", "ZOMATO MEDIA")),
    MerchantEntry("SWIGGY", "Swiggy", C.FOOD_DELIVERY, 0.9, ("BUNDL TECHNOLOGIES",)),
    MerchantEntry("EATSURE", "EatSure", C.FOOD_DELIVERY, 0.85, ("REBEL FOODS",)),

    # Dining
    MerchantEntry("STARBUCKS", "Starbucks", C.DINING, 0.85, ("TATA STARBUCKS",)),
    MerchantEntry("DOMINOS", "Domino's", C.DINING, 0.85, ("JUBILANT FOODWORKS", "DOMINO")),
    MerchantEntry("MCDONALDS", "McDonald's", C.DINING, 0.85, ("HARDCASTLE RESTAURANTS", "MCDONALD")),
    MerchantEntry("KFC", "KFC", C.DINING, 0.85, ("DEVYANI INTERNATIONAL",)),
    MerchantEntry("HALDIRAM", "Haldiram's", C.DINING, 0.8, ("HALDIRAMS",)),
    MerchantEntry("CAFE COFFEE DAY", "Cafe Coffee Day", C.DINING, 0.8, ("CCD", "COFFEE DAY")),
    MerchantEntry("BAKERY", "Bakery", C.DINING, 0.8, ("BAKERS", "BAKE HOUSE")),

    # Travel
    MerchantEntry("UBER", "Uber", C.TRAVEL, 0.9, ("UBER INDIA", "UBERINDIA")),
    MerchantEntry("OLA", "Ola", C.TRAVEL, 0.9, ("OLA CABS", "ANI TECHNOLOGIES", "OLACABS")),
    MerchantEntry("RAPIDO", "Rapido", C.TRAVEL, 0.85, ("ROPPEN TRANSPORTATION",)),
    MerchantEntry("IRCTC", "IRCTC", C.TRAVEL, 0.9, ("INDIAN RAILWAY",)),
    MerchantEntry("MAKEMYTRIP", "MakeMyTrip", C.TRAVEL, 0.9, ("MMT", "MAKE MY TRIP")),
    MerchantEntry("GOIBIBO", "Goibibo", C.TRAVEL, 0.85, ("IBIBO GROUP",)),
    MerchantEntry("CLEARTRIP", "Cleartrip", C.TRAVEL, 0.85),
    MerchantEntry("REDBUS", "redBus", C.TRAVEL, 0.85, ("RED BUS",)),
    MerchantEntry("OYO", "Oyo", C.TRAVEL, 0.85, ("ORAVEL STAYS", "OYO ROOMS")),
    MerchantEntry("INDIGO", "IndiGo", C.TRAVEL, 0.9, ("INTERGLOBE AVIATION",)),
    MerchantEntry("AIR INDIA", "Air India", C.TRAVEL, 0.85, ("AIRINDIA",)),
    MerchantEntry("FASTAG", "FASTag", C.TRAVEL, 0.8, ("NETC FASTAG",)),

    # Fuel
    MerchantEntry("IOCL", "Indian Oil", C.FUEL, 0.9, ("INDIAN OIL", "INDIANOIL")),
    MerchantEntry("BPCL", "Bharat Petroleum", C.FUEL, 0.9, ("BHARAT PETROLEUM",)),
    MerchantEntry("HPCL", "Hindustan Petroleum", C.FUEL, 0.9, ("HINDUSTAN PETROLEUM",)),
    MerchantEntry("NAYARA", "Nayara Energy", C.FUEL, 0.85, ("NAYARA ENERGY",)),
    MerchantEntry("SERVICE STATION", "Service Station", C.FUEL, 0.8, ("FILLING STATION", "PETROL PUMP")),

    # Utilities: gas
    MerchantEntry("IGL", "Indraprastha Gas Limited", C.BILLS_UTILITIES, 0.9,
                  ("INDRAPRASTHA GAS", "INDRAPRASTHAGA", "INDRAPRASTHA")),
    MerchantEntry("MGL", "Mahanagar Gas Limited", C.BILLS_UTILITIES, 0.9, ("MAHANAGAR GAS",)),
    MerchantEntry("ADANI GAS", "Adani Total Gas", C.BILLS_UTILITIES, 0.85, ("ADANI TOTAL GAS",)),

    # Utilities: electricity
    MerchantEntry("MSEDCL", "Maharashtra State Electricity Distribution Company", C.BILLS_UTILITIES, 0.9,
                  ("MAHADISCOM", "MAHAVITARAN", "EL")),
    MerchantEntry("BSES", "BSES", C.BILLS_UTILITIES, 0.9, ("BSES RAJDHANI", "BSES YAMUNA")),
    MerchantEntry("TATA POWER", "Tata Power", C.BILLS_UTILITIES, 0.9, ("TATAPOWER",)),
    MerchantEntry("ADANI ELECTRICITY", "Adani Electricity", C.BILLS_UTILITIES, 0.9, ("AEML",)),
    MerchantEntry("BESCOM", "BESCOM", C.BILLS_UTILITIES, 0.9),
    MerchantEntry("TANGEDCO", "TANGEDCO", C.BILLS_UTILITIES, 0.9, ("TNEB",)),
    MerchantEntry("ELECTRICITY BOARD", "Electricity Board", C.BILLS_UTILITIES, 0.8, ("ELECTRICITY",)),

    # Utilities: telecom
    MerchantEntry("AIRTEL", "Airtel", C.BILLS_UTILITIES, 0.85, ("BHARTI AIRTEL",)),
    MerchantEntry("JIO", "Jio", C.BILLS_UTILITIES, 0.85, ("RELIANCE JIO", "JIO RECHARGE")),
    MerchantEntry("VODAFONE", "Vodafone Idea", C.BILLS_UTILITIES, 0.85, ("VODAFONE IDEA", "IDEA")),
    MerchantEntry("BSNL", "BSNL", C.BILLS_UTILITIES, 0.85),

    # E-commerce
    MerchantEntry("AMAZON", "Amazon", C.SHOPPING, 0.9, ("AMZN", "AMAZON PAY", "AMAZON SELLER")),
    MerchantEntry("FLIPKART", "Flipkart", C.SHOPPING, 0.9, ("FKRT", "FLIPKART INTERNET")),
    MerchantEntry("MYNTRA", "Myntra", C.SHOPPING, 0.9, ("MYNTRA DESIGNS",)),
    MerchantEntry("AJIO", "Ajio", C.SHOPPING, 0.85),
    MerchantEntry("MEESHO", "Meesho", C.SHOPPING, 0.85, ("FASHNEAR TECHNOLOGIES",)),
    MerchantEntry("NYKAA", "Nykaa", C.SHOPPING, 0.85, ("FSN E COMMERCE",)),
    MerchantEntry("CROMA", "Croma", C.SHOPPING, 0.85, ("INFINITI RETAIL",)),
    MerchantEntry("RELIANCE DIGITAL", "Reliance Digital", C.SHOPPING, 0.85),
    MerchantEntry("TANISHQ", "Tanishq", C.SHOPPING, 0.85, ("TITAN COMPANY",)),

    # Healthcare
    MerchantEntry("APOLLO", "Apollo", C.HEALTHCARE, 0.85, ("APOLLO PHARMACY", "APOLLO HOSPITAL")),
    MerchantEntry("FORTIS", "Fortis", C.HEALTHCARE, 0.85, ("FORTIS HEALTHCARE",)),
    MerchantEntry("MAX HEALTHCARE", "Max Healthcare", C.HEALTHCARE, 0.85, ("MAX HOSPITAL",)),
    MerchantEntry("PHARMEASY", "PharmEasy", C.HEALTHCARE, 0.85, ("AXELIA SOLUTIONS",)),
    MerchantEntry("TATA 1MG", "Tata 1mg", C.HEALTHCARE, 0.85, ("1MG",)),
    MerchantEntry("NETMEDS", "Netmeds", C.HEALTHCARE, 0.85),
    MerchantEntry("MEDPLUS", "MedPlus", C.HEALTHCARE, 0.85, ("MED PLUS",)),
    MerchantEntry("CHEMIST", "Chemist", C.HEALTHCARE, 0.75, ("MEDICAL STORE", "MEDICALS", "DRUG HOUSE")),

    # Education
    MerchantEntry("PHYSICSWALLAH", "PhysicsWallah", C.EDUCATION, 0.85, ("PHYSICS WALLAH",)),
    MerchantEntry("BYJUS", "BYJU'S", C.EDUCATION, 0.85, ("BYJU", "THINK AND LEARN")),
    MerchantEntry("UNACADEMY", "Unacademy", C.EDUCATION, 0.85, ("SORTING HAT",)),
    MerchantEntry("VEDANTU", "Vedantu", C.EDUCATION, 0.85),
    MerchantEntry("COURSERA", "Coursera", C.EDUCATION, 0.85),
    MerchantEntry("UDEMY", "Udemy", C.EDUCATION, 0.85),

    # Brokers and clearing corporations
    MerchantEntry("ZERODHA", "Zerodha", C.INVESTMENT, 0.9, ("ZERODHA BROKING", "KITE")),
    MerchantEntry("GROWW", "Groww", C.INVESTMENT, 0.9, ("NEXTBILLION TECHNOLOGY",)),
    MerchantEntry("UPSTOX", "Upstox", C.INVESTMENT, 0.9, ("RKSV SECURITIES",)),
    MerchantEntry("ANGEL ONE", "Angel One", C.INVESTMENT, 0.9, ("ANGEL BROKING", "ANGELONE")),
    MerchantEntry("ICICI DIRECT", "ICICI Direct", C.INVESTMENT, 0.85, ("ICICI SECURITIES", "ICICIDIRECT")),
    MerchantEntry("HDFC SECURITIES", "HDFC Securities", C.INVESTMENT, 0.85, ("HSL SEC", "HDFC SEC")),
    MerchantEntry("INDIAN CLEARING CORPORATION", "Indian Clearing Corporation", C.INVESTMENT, 0.9,
                  ("ICCL", "INDIAN CLEARING", "NSE CLEARING", "NSCCL")),
    MerchantEntry("NSDL", "NSDL", C.INVESTMENT, 0.85),
    MerchantEntry("CDSL", "CDSL", C.INVESTMENT, 0.85),

    # Crypto exchanges (legal entity names as aliases)
    MerchantEntry("WAZIRX", "WazirX", C.INVESTMENT, 0.9, ("ZANMAI LABS", "ZANMAI")),
    MerchantEntry("COINDCX", "CoinDCX", C.INVESTMENT, 0.9, ("NEBULAS TECHNOLOGIES", "NEBULAS", "DCX")),
    MerchantEntry("COINSWITCH", "CoinSwitch", C.INVESTMENT, 0.9, ("BITCIPHER LABS", "BITCIPHER")),
    MerchantEntry("ZEBPAY", "ZebPay", C.INVESTMENT, 0.9, ("ZEB IT SERVICE",)),
    MerchantEntry("UNOCOIN", "Unocoin", C.INVESTMENT, 0.9, ("UNOCOMMERCE",)),
    MerchantEntry("BINANCE", "Binance", C.INVESTMENT, 0.9, ("BIFINANCE",)),
    MerchantEntry("COINBASE", "Coinbase", C.INVESTMENT, 0.9, ("CB PAY",)),
    MerchantEntry("KRAKEN", "Kraken", C.INVESTMENT, 0.9, ("PAYWARD",)),
    MerchantEntry("CRYPTOCOM", "Crypto.com", C.INVESTMENT, 0.9, ("CRYPTO COM", "FORIS DAX", "FORIS")),
    MerchantEntry("KUCOIN", "KuCoin", C.INVESTMENT, 0.9, ("MEK GLOBAL",)),
    MerchantEntry("BITSTAMP", "Bitstamp", C.INVESTMENT, 0.9),
]

# Category adopted only at or above this confidence
CATEGORY_CONFIDENCE = 0.8
FUZZY_CONFIDENCE = 0.7
ALIAS_CONFIDENCE_PENALTY = 0.05

SHORT_ALIAS_LEN = 4
FUZZY_MIN_LEN = 5


# ======================================================
# COMPILED PATTERNS (compile once)
# ======================================================

def _boundary_pattern(alias: str) -> re.Pattern:
    return re.compile(r"(?:^|[\s\-])" + re.escape(alias) + r"(?=$|[\s\-])")


def _alias_pattern(alias: str) -> re.Pattern:
    if len(alias) <= SHORT_ALIAS_LEN:
        return _boundary_pattern(alias)
    return re.compile(re.escape(alias))


P_KEYS = [(e, re.compile(r"\b" + re.escape(e.key) + r"\b")) for e in MERCHANT_TABLE]
P_ALIASES = [(e, a, _alias_pattern(a)) for e in MERCHANT_TABLE for a in e.aliases]
FUZZY_KEYS = [e for e in MERCHANT_TABLE if len(e.key) >= FUZZY_MIN_LEN and " " not in e.key]


# ======================================================
# MATCHING
# ======================================================

def _match_key(text: str) -> Optional[MerchantMatch]:
    for entry, pat in P_KEYS:
        if pat.search(text):
            return MerchantMatch(entry.name, entry.category, entry.confidence, entry.key, "key")
    return None


def _match_alias(text: str, tokens: Sequence[str]) -> Optional[MerchantMatch]:
    token_set = set(tokens)
    for entry, alias, pat in P_ALIASES:
        short = len(alias) <= SHORT_ALIAS_LEN
        if (short and alias in token_set) or pat.search(text):
            conf = max(entry.confidence - ALIAS_CONFIDENCE_PENALTY, CATEGORY_CONFIDENCE)
            return MerchantMatch(entry.name, entry.category, conf, alias, "alias")
    return None


def _match_fuzzy(tokens: Sequence[str]) -> Optional[MerchantMatch]:
    for entry in FUZZY_KEYS:
        for tok in tokens:
            if len(tok) < FUZZY_MIN_LEN:
                continue
            if tok.startswith(entry.key) or entry.key.startswith(tok):
                return MerchantMatch(entry.name, entry.category, FUZZY_CONFIDENCE, tok, "fuzzy")
    return None


def canonicalize(text: str, tokens: Sequence[str] = ()) -> Optional[MerchantMatch]:
    """
    Resolve the canonical merchant for a cleaned, uppercased narration.

    Args:
        text: NormalizedNarration.text
        tokens: NormalizedNarration.tokens (used for exact short-alias equality
            and fuzzy prefixes)

    Returns:
        MerchantMatch or None when nothing in the table applies.
    """
    if not text:
        return None
    return _match_key(text) or _match_alias(text, tokens) or _match_fuzzy(tokens)
