"""Built-in station reference data.

Used when no station reference file is configured.
"""

from __future__ import annotations

from core.types import StationMapping


def _station(
    tiploc_code: str,
    station_code: str,
    station_name: str,
    is_network_connection: bool = False,
) -> StationMapping:
    return StationMapping(
        tiploc_code=tiploc_code,
        station_code=station_code,
        station_name=station_name,
        is_network_connection=is_network_connection,
    )


DEFAULT_STATION_MAPPINGS: tuple[StationMapping, ...] = (
    # London terminals
    _station("EUSTON", "EUS", "London Euston"),
    _station("KNGX", "KGX", "London King's Cross"),
    _station("STPX", "STP", "London St Pancras", True),
    _station("STPANCI", "STP", "London St Pancras International", True),
    _station("PADTON", "PAD", "London Paddington"),
    _station("VICTRIA", "VIC", "London Victoria"),
    _station("WATRLMN", "WAT", "London Waterloo"),
    _station("LIVST", "LST", "London Liverpool Street"),
    _station("CHRX", "CHX", "London Charing Cross"),
    # Major cities
    _station("BHAM", "BHM", "Birmingham New Street"),
    _station("BHAMNWS", "BHM", "Birmingham New Street"),
    _station("MNCRPIC", "MAN", "Manchester Piccadilly"),
    _station("LEEDS", "LDS", "Leeds"),
    _station("EDINBUR", "EDB", "Edinburgh Waverley"),
    _station("GLGC", "GLC", "Glasgow Central"),
    _station("BRSTLTM", "BRI", "Bristol Temple Meads"),
    _station("CRDFCNT", "CDF", "Cardiff Central"),
    _station("YORK", "YRK", "York"),
    _station("NEWCSTLE", "NCL", "Newcastle"),
    # International connections
    _station("ASHFKY", "AFK", "Ashford International", True),
    _station("EBSFDOM", "EBD", "Ebbsfleet International", True),
    # Other
    _station("RDNGSTN", "RDG", "Reading"),
    _station("OXFD", "OXF", "Oxford"),
    _station("CAMBDGE", "CBG", "Cambridge"),
    _station("SOTON", "SOU", "Southampton Central"),
    _station("BRGHTNS", "BTN", "Brighton"),
    _station("LIVRPL", "LIV", "Liverpool Lime Street"),
    _station("SHEFFLD", "SHF", "Sheffield"),
    _station("NTTM", "NOT", "Nottingham"),
    _station("EXETSD", "EXD", "Exeter St Davids"),
    _station("PLYMTH", "PLY", "Plymouth"),
    _station("MKTNKYL", "MKC", "Milton Keynes Central"),
)
