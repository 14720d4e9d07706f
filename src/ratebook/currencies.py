"""
Built-in currency lists per table type.

Used when the upstream cannot be reached to list the currencies a table
quotes.
"""

from ratebook.models import CurrencyInfo, TableType

TABLE_A_CURRENCIES = [
    ("THB", "baht (Thailand)"),
    ("USD", "US dollar"),
    ("AUD", "Australian dollar"),
    ("HKD", "Hong Kong dollar"),
    ("CAD", "Canadian dollar"),
    ("NZD", "New Zealand dollar"),
    ("SGD", "Singapore dollar"),
    ("EUR", "euro"),
    ("HUF", "forint (Hungary)"),
    ("CHF", "Swiss franc"),
    ("GBP", "pound sterling"),
    ("UAH", "hryvnia (Ukraine)"),
    ("JPY", "yen (Japan)"),
    ("CZK", "Czech koruna"),
    ("DKK", "Danish krone"),
    ("ISK", "Icelandic krona"),
    ("NOK", "Norwegian krone"),
    ("SEK", "Swedish krona"),
    ("RON", "Romanian leu"),
    ("BGN", "lev (Bulgaria)"),
    ("TRY", "Turkish lira"),
    ("ILS", "new Israeli shekel"),
    ("CLP", "Chilean peso"),
    ("PHP", "Philippine peso"),
    ("MXN", "Mexican peso"),
    ("ZAR", "rand (South Africa)"),
    ("BRL", "real (Brazil)"),
    ("MYR", "ringgit (Malaysia)"),
    ("IDR", "Indonesian rupiah"),
    ("INR", "Indian rupee"),
    ("KRW", "South Korean won"),
    ("CNY", "yuan renminbi (China)"),
    ("XDR", "SDR (IMF)"),
]

TABLE_B_CURRENCIES = [
    ("AFN", "afghani (Afghanistan)"),
    ("MGA", "ariary (Madagascar)"),
    ("PAB", "balboa (Panama)"),
    ("ETB", "Ethiopian birr"),
    ("VES", "bolivar soberano (Venezuela)"),
    ("BOB", "boliviano (Bolivia)"),
    ("BRL", "real (Brazil)"),
    ("BND", "Brunei dollar"),
    ("FJD", "Fiji dollar"),
    ("XCD", "East Caribbean dollar"),
    ("AMD", "dram (Armenia)"),
    ("CVE", "Cape Verde escudo"),
    ("AWG", "Aruban florin"),
    ("GMD", "dalasi (Gambia)"),
    ("GEL", "lari (Georgia)"),
    ("LBP", "Lebanese pound"),
    ("ALL", "lek (Albania)"),
    ("HNL", "lempira (Honduras)"),
    ("SLE", "leone (Sierra Leone)"),
    ("MDL", "Moldovan leu"),
    ("MKD", "denar (North Macedonia)"),
    ("AZN", "Azerbaijani manat"),
    ("TMT", "Turkmen manat"),
    ("MZN", "metical (Mozambique)"),
    ("NGN", "naira (Nigeria)"),
    ("NAD", "Namibian dollar"),
    ("TWD", "new Taiwan dollar"),
    ("PGK", "kina (Papua New Guinea)"),
    ("LAK", "kip (Laos)"),
    ("MWK", "Malawian kwacha"),
    ("ZMW", "Zambian kwacha"),
    ("AOA", "kwanza (Angola)"),
    ("MMK", "kyat (Myanmar)"),
    ("GHS", "Ghanaian cedi"),
    ("HTG", "gourde (Haiti)"),
    ("PYG", "guarani (Paraguay)"),
    ("ANG", "Netherlands Antillean guilder"),
    ("LSL", "loti (Lesotho)"),
    ("SZL", "lilangeni (Eswatini)"),
    ("MRU", "ouguiya (Mauritania)"),
]

TABLE_C_CURRENCIES = [
    ("USD", "US dollar"),
    ("AUD", "Australian dollar"),
    ("CAD", "Canadian dollar"),
    ("EUR", "euro"),
    ("HUF", "forint (Hungary)"),
    ("CHF", "Swiss franc"),
    ("GBP", "pound sterling"),
    ("JPY", "yen (Japan)"),
    ("CZK", "Czech koruna"),
    ("DKK", "Danish krone"),
    ("NOK", "Norwegian krone"),
    ("SEK", "Swedish krona"),
    ("XDR", "SDR (IMF)"),
]

_BY_TABLE = {
    TableType.A: TABLE_A_CURRENCIES,
    TableType.B: TABLE_B_CURRENCIES,
    TableType.C: TABLE_C_CURRENCIES,
}


def default_currencies(table_type: TableType = TableType.A) -> list[CurrencyInfo]:
    """Built-in currencies of a table."""
    return [
        CurrencyInfo(code=code, name=f"{code} - {name}")
        for code, name in _BY_TABLE[table_type]
    ]
