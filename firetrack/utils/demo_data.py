from __future__ import annotations

from io import StringIO
from typing import Dict, List
import csv


def _table(raw: str) -> List[Dict[str, str]]:
    """Rows of a tab separated demo table keyed by its header line.

    Blank cells come back as empty strings and fully blank rows are skipped.
    """
    lines = [line for line in raw.strip().splitlines() if line.strip()]
    reader = csv.DictReader(StringIO("\n".join(lines)), delimiter="\t", restval="")
    return [{key: (value or "").strip() for key, value in row.items()} for row in reader]


TECHNICIAN_NAMES: List[str] = ["Dan Morse", "Mike Tatro", "Sarah Kelley"]


SITE_DATA = _table(
    """
Code\tName\tAddress\tServiceMonths\tSystemMonths\tExtinguisherTech\tSystemTech\tNotes
S01\tMaple Street Diner\t12 Maple St, Burlington, VT, 05401\t3\t3 9\tDan Morse\tDan Morse\tHood system over fryer line
S02\tGreen Mountain Lodge\t455 Route 100, Stowe, VT, 05672\t1 7\t\tMike Tatro\t\tLockbox on side door
S03\tLakeside Elementary\t98 School Rd, Colchester, VT, 05446\t8\t\tSarah Kelley\t\t
S04\tRiverbend Brewing\t7 Mill Ln, Winooski, VT, 05404\t5\t5 11\tMike Tatro\tDan Morse\tCall ahead, brewing days Tue/Thu
S05\tNorthside Auto\t301 Industrial Ave, Williston, VT, 05495\t10\t\tDan Morse\t\t
"""
)


ASSET_DATA = _table(
    """
Site\tUnit\tLocation\tType\tBrand\tSize\tLastService\tBatteryDue
S01\t1\tKitchen\tABC\tAmerex\t5lb\t2018\t
S01\t2\tFront door\tABC\tAmerex\t5lb\t2018\t
S01\t3\tFryer line\tWet Chemical\tAmerex\t6 Liter\t2020\t
S01\t4\tRear exit\tExit Light\t\t\t\tyes
S02\t1\tLobby\tABC\tBadger\t10lb\t2021\t
S02\t2\tBoiler room\tCO2\tKidde\t10lb\t2019\t
S02\t3\tHall\tEmergency Light\t\t\t\t
S03\t1\tGym\tABC\tAmerex\t10lb\t2017\t
S03\t2\tServer room\tClean Agent\tAmerex\t11lb\t2019\t
S03\t3\tCafeteria\tWater\tBuckeye\t2.5 gal\t\t
S04\t1\tBrewhouse\tABC\tAmerex\t20lb\t2020\t
S04\t2\tTaproom\tCO2\tAmerex\t5lb\t2018\t
S05\t1\tShop floor\tABC\tBadger\t20lb\t2019\t
S05\t2\tOffice\tABC\tBadger\t5lb\t2023\t
"""
)


TANK_DATA = _table(
    """
Site\tQuantity\tBrand\tSize\tType\tYear
S01\t2\tAnsul\t3 gal\tWet Chemical\t2012
S04\t1\tKidde\t1.5 gal\tWet Chemical\t2016
S04\t1\tAnsul\t35lb\tDry Chemical\t2018
"""
)


def month_list(raw: str) -> List[int]:
    return sorted(int(part) for part in (raw or "").split() if part.strip())
