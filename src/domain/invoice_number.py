"""Invoice number formatting

Templates may contain these placeholders:

    %CN%    customer number of the buyer
    %YYYY%  four digit year
    %YY%    two digit year
    %C%     counter
    %0nC%   counter, zero padded to n digits (e.g. %04C% -> 0042)
"""

import re
from datetime import date
from typing import Optional
from pydantic import BaseModel

CUSTOMER_NUMBER_PATTERN = re.compile(r"%CN%")
COUNTER_PATTERN = re.compile(r"%(0?)(\d*)C%")
YEAR4_PATTERN = re.compile(r"%YYYY%")
YEAR2_PATTERN = re.compile(r"%YY%")


def format_invoice_number(template: str, customer_number: str, counter: int, today: date) -> str:
    """Render an invoice number template"""
    number = CUSTOMER_NUMBER_PATTERN.sub(lambda _: customer_number or "", template)
    number = YEAR4_PATTERN.sub(lambda _: f"{today.year:04d}", number)
    number = YEAR2_PATTERN.sub(lambda _: f"{today.year % 100:02d}", number)

    def _counter(match: "re.Match") -> str:
        zero, width = match.group(1), match.group(2)
        if zero and width:
            return f"{counter:0{int(width)}d}"
        return str(counter)

    return COUNTER_PATTERN.sub(_counter, number)


class InvoiceNumbering(BaseModel):
    """Numbering policy of an owner"""

    template: str = "%YYYY%-%04C%"
    use_local_counter: bool = False  # separate counter per buyer company

    def counter_scope(self, company_id: Optional[int]) -> Optional[int]:
        """Company the counter is scoped to, or None for one counter per owner"""
        return company_id if self.use_local_counter else None

    def format(self, counter: int, today: date, customer_number: str = "") -> str:
        return format_invoice_number(self.template, customer_number, counter, today)
