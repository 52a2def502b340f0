"""
Built-in card dataset.

Tables are keyed by card id and use the same loosely typed record shape as
external JSON datasets (see cards.load_card_tables).
"""

from typing import Any, Dict

_STOCK_RULE = "Only you may buy as many shares as you want at this price. Everyone may sell at this price."
_SPLIT_RULE = "Everyone who owns {symbol} shares receives {effect}."


def _stock(symbol: str, name: str, type_: str, price: int, dividend: int = 0, **extra: Any) -> Dict[str, Any]:
    card = {
        "type": type_,
        "name": name,
        "symbol": symbol,
        "price": price,
        "dividend": dividend,
        "rule": _STOCK_RULE,
        "description": f"{name} trading at ${price} per share.",
    }
    card.update(extra)
    return card


SMALL_DEALS: Dict[str, Dict[str, Any]] = {
    "sd-myt4u-1": _stock("MYT4U", "MYT4U Electronics", "Stock", 1),
    "sd-myt4u-5": _stock("MYT4U", "MYT4U Electronics", "Stock", 5),
    "sd-myt4u-10": _stock("MYT4U", "MYT4U Electronics", "Stock", 10),
    "sd-myt4u-20": _stock("MYT4U", "MYT4U Electronics", "Stock", 20),
    "sd-myt4u-30": _stock("MYT4U", "MYT4U Electronics", "Stock", 30),
    "sd-on2u-5": _stock("ON2U", "ON2U Entertainment", "Stock", 5),
    "sd-on2u-20": _stock("ON2U", "ON2U Entertainment", "Stock", 20),
    "sd-on2u-40": _stock("ON2U", "ON2U Entertainment", "Stock", 40),
    "sd-ok4u-10": _stock("OK4U", "OK4U Drug Co.", "Stock", 10),
    "sd-ok4u-30": _stock("OK4U", "OK4U Drug Co.", "Stock", 30),
    "sd-gro4us-10": _stock("GRO4US", "GRO4US Fund", "Mutual Fund", 10),
    "sd-gro4us-20": _stock("GRO4US", "GRO4US Fund", "Mutual Fund", 20),
    "sd-2bigpower": _stock("2BIGPOWER", "2BIGPOWER Preferred", "Preferred Stock", 1200, 10),
    "sd-cd-4000": _stock("CD", "Certificate of Deposit", "Certificate of Deposit", 4000, 20),
    "sd-cd-5000": _stock("CD", "Certificate of Deposit", "Certificate of Deposit", 5000, 25),
    "sd-ok4u-split": {
        "type": "Stock Split",
        "name": "OK4U Drug Co. Stock Split",
        "symbol": "OK4U",
        "rule": _SPLIT_RULE.format(symbol="OK4U", effect="two shares for every one held"),
    },
    "sd-myt4u-split": {
        "type": "Stock Split",
        "name": "MYT4U Electronics Stock Split",
        "symbol": "MYT4U",
        "rule": _SPLIT_RULE.format(symbol="MYT4U", effect="two shares for every one held"),
    },
    "sd-on2u-reverse": {
        "type": "Reverse Split",
        "name": "ON2U Entertainment Reverse Split",
        "symbol": "ON2U",
        "rule": _SPLIT_RULE.format(symbol="ON2U", effect="one share for every two held"),
    },
    "sd-house-3br": {
        "type": "House",
        "name": "3Br/2Ba House for Sale",
        "description": "Owner moving out of state. Good rental area.",
        "cost": 50000,
        "downPayment": 5000,
        "mortgage": 45000,
        "cashFlow": 100,
        "landType": "3br/2ba",
    },
    "sd-house-3br-bank": {
        "type": "House",
        "name": "3Br/2Ba House, Bank Foreclosure",
        "description": "Bank wants this property off its books.",
        "cost": 35000,
        "downPayment": 2000,
        "mortgage": 33000,
        "cashFlow": 220,
        "landType": "3br/2ba",
    },
    "sd-condo-2br": {
        "type": "Condo",
        "name": "2Br/1Ba Condo for Sale",
        "description": "Parents selling their son's condo near the college.",
        "cost": 40000,
        "downPayment": 5000,
        "mortgage": 35000,
        "cashFlow": 140,
        "landType": "2br/1ba",
    },
    "sd-land-10": {
        "type": "Land",
        "name": "10 Acres Raw Land",
        "description": "Owner is selling off family land.",
        "cost": 5000,
        "downPayment": 5000,
        "cashFlow": 0,
        "landType": "10 acres",
    },
    "sd-krugerrands": {
        "type": "Gold Coin",
        "name": "Krugerrands",
        "description": "Ten gold coins offered by a private collector.",
        "cost": 3000,
        "quantity": 10,
        "landType": "krugerrands",
    },
    "sd-spanish-coin": {
        "type": "Rare Coin",
        "name": "1500's Spanish Coin",
        "description": "A rare gold coin from a sunken galleon.",
        "cost": 500,
        "quantity": 1,
        "landType": "1500's spanish",
    },
    "sd-sandwich-lp": {
        "type": "Limited Partnership",
        "name": "Sandwich Shop Limited Partnership",
        "description": "Buy a share of a new sandwich franchise as a limited partner.",
        "cost": 5000,
        "cashFlow": 0,
        "landType": "limited partnership",
    },
    "sd-part-time-company": {
        "type": "Company",
        "name": "Start a Company Part Time",
        "description": "Start a software company from home in your spare time.",
        "cost": 5000,
        "cashFlow": 0,
        "landType": "software",
    },
}

BIG_DEALS: Dict[str, Dict[str, Any]] = {
    "bd-duplex": {
        "type": "Duplex",
        "name": "Duplex for Sale",
        "description": "Owner retiring. Both units rented.",
        "cost": 55000,
        "downPayment": 8000,
        "mortgage": 47000,
        "cashFlow": 160,
        "units": 2,
        "landType": "duplex",
    },
    "bd-4plex": {
        "type": "4-Plex",
        "name": "4-Plex for Sale",
        "description": "Seller is moving to a retirement community.",
        "cost": 90000,
        "downPayment": 16000,
        "mortgage": 74000,
        "cashFlow": 320,
        "units": 4,
        "landType": "4-plex",
    },
    "bd-8plex": {
        "type": "8-Plex",
        "name": "8-Plex for Sale",
        "description": "Fully rented, seller wants a quick close.",
        "cost": 220000,
        "downPayment": 40000,
        "mortgage": 180000,
        "cashFlow": 1700,
        "units": 8,
        "landType": "8-plex",
    },
    "bd-apartment-12": {
        "type": "Apartment",
        "name": "12-Unit Apartment House",
        "description": "Owner is liquidating to pay estate taxes.",
        "cost": 350000,
        "downPayment": 50000,
        "mortgage": 300000,
        "cashFlow": 2400,
        "units": 12,
        "landType": "apartment",
    },
    "bd-apartment-24": {
        "type": "Apartment",
        "name": "24-Unit Apartment House",
        "description": "Foreclosure in a fast growing neighbourhood.",
        "cost": 575000,
        "downPayment": 75000,
        "mortgage": 500000,
        "cashFlow": 3400,
        "units": 24,
        "landType": "apartment",
    },
    "bd-car-wash": {
        "type": "Business",
        "name": "Automated Car Wash",
        "description": "Car wash for sale near a busy intersection.",
        "cost": 125000,
        "downPayment": 20000,
        "mortgage": 105000,
        "cashFlow": 1500,
        "landType": "car wash",
    },
    "bd-mall": {
        "type": "Business",
        "name": "Small Shopping Mall",
        "description": "Strip mall anchored by a grocery store.",
        "cost": 100000,
        "downPayment": 50000,
        "mortgage": 50000,
        "cashFlow": 1000,
        "landType": "mall",
    },
    "bd-widget": {
        "type": "Company",
        "name": "Widget Company",
        "description": "Manufacturer of industrial widgets, owner retiring.",
        "cost": 250000,
        "downPayment": 30000,
        "mortgage": 220000,
        "cashFlow": 2000,
        "landType": "widget company",
    },
    "bd-pizza": {
        "type": "Franchise",
        "name": "Pizza Franchise",
        "description": "Established pizza franchise with a loyal customer base.",
        "cost": 500000,
        "downPayment": 100000,
        "mortgage": 400000,
        "cashFlow": 5000,
        "landType": "pizza franchise",
    },
}

OFFERS: Dict[str, Dict[str, Any]] = {
    "of-plex-buyer": {
        "type": "Plex",
        "name": "Plex Buyer",
        "offerPerUnit": 45000,
        "rule": "Everyone may sell any duplex or plex at this price per unit.",
    },
    "of-apartment-buyer": {
        "type": "Apartment",
        "name": "Apartment House Buyer",
        "offerPerUnit": 40000,
        "lowestUnit": 12,
        "rule": "Everyone may sell any apartment house of 12 units or more at this price per unit.",
    },
    "of-house-buyer": {
        "type": "3br/2ba",
        "name": "House Buyer - 3Br/2Ba",
        "offer": 65000,
        "rule": "Everyone may sell a 3Br/2Ba house at this price.",
    },
    "of-condo-buyer": {
        "type": "2br/1ba",
        "name": "Condo Buyer - 2Br/1Ba",
        "offer": 55000,
        "rule": "If you own a 2Br/1Ba condo you may sell it at this price.",
    },
    "of-limited-sold": {
        "type": "Limited",
        "name": "Limited Partnership Sold",
        "rule": "Everyone who owns a limited partnership receives twice their investment.",
    },
    "of-car-wash-buyer": {
        "type": "Car Wash",
        "name": "Car Wash Buyer",
        "offer": 250000,
        "rule": "If you own a car wash you may sell it at this price.",
    },
    "of-mall-buyer": {
        "type": "Mall",
        "name": "Shopping Mall Wanted",
        "offer": 200000,
        "rule": "Everyone who owns a small mall may sell it at this price.",
    },
    "of-widget-buyer": {
        "type": "Widget",
        "name": "Widget Company Buyout",
        "offer": 500000,
        "rule": "Everyone who owns a widget company may sell it.",
    },
    "of-software-buyer": {
        "type": "Software",
        "name": "Software Company Buyout",
        "offer": 100000,
        "rule": "Everyone who started a software company may sell it.",
    },
    "of-gold-buyer": {
        "type": "Krugerrands",
        "name": "Gold Coin Buyer",
        "offer": 600,
        "rule": "Everyone may sell Krugerrands at this price per coin.",
    },
    "of-spanish-buyer": {
        "type": "1500's Spanish",
        "name": "Coin Collector",
        "offer": 5000,
        "rule": "Everyone may sell 1500's Spanish coins at this price per coin.",
    },
    "of-business-boom": {
        "type": "Business",
        "name": "Small Business Boom",
        "cashFlow": 250,
        "rule": "Everyone who owns a business gains $250 monthly cash flow.",
    },
    "of-inflation": {
        "type": "Economy",
        "name": "Inflation Hits",
        "description": "Prices rise across the board. Nothing happens this time.",
    },
}

DOODADS: Dict[str, Dict[str, Any]] = {
    "dd-golf-clubs": {"type": "Doodad", "name": "New Golf Clubs", "cost": 260},
    "dd-coffee-maker": {"type": "Doodad", "name": "Buy Cappuccino Machine", "cost": 150},
    "dd-dinner": {"type": "Doodad", "name": "Dinner Out", "cost": 80},
    "dd-phone": {"type": "Doodad", "name": "New Phone", "cost": 900},
    "dd-car-repair": {"type": "Doodad", "name": "Car Needs New Tires", "cost": 300},
    "dd-boat": {
        "type": "Doodad",
        "name": "Buy a Boat",
        "description": "Pay the down payment and take a loan for the rest.",
        "cost": 1000,
        "loan": 17000,
        "payment": 340,
    },
    "dd-big-screen-tv": {
        "type": "Doodad",
        "name": "Big Screen TV on Credit",
        "cost": 500,
        "loan": 3500,
        "payment": 120,
    },
    "dd-braces": {
        "type": "Doodad",
        "name": "Kid's Braces",
        "description": "Only if you have a child.",
        "cost": 2000,
        "child": True,
    },
    "dd-college": {
        "type": "Doodad",
        "name": "Kid's College Fund",
        "description": "Only if you have a child.",
        "cost": 1200,
        "child": True,
    },
    "dd-audit": {
        "type": "Doodad",
        "name": "Tax Audit",
        "description": "Pay 10% of your cash to settle with the tax office.",
        "amount": 0.1,
    },
}

DEFAULT_CARD_DATA: Dict[str, Dict[str, Dict[str, Any]]] = {
    "smallDeal": SMALL_DEALS,
    "bigDeal": BIG_DEALS,
    "offer": OFFERS,
    "doodad": DOODADS,
}
