"""Static lookup tables for assigning practices to Welsh unitary authorities.

The source address data records county and post-town as free text: many
rows carry preserved or historic county names ("Gwent", "Mid Glamorgan") that
span several modern authorities, and the post-town is often a better guide.
These tables hold the curated mappings. Every scan over them is ordered and
first-match, so entry order matters.
"""

from types import MappingProxyType
from typing import Final, NamedTuple


class CountyRecord(NamedTuple):
    """A Welsh unitary authority with its ONS code and postcode districts."""

    code: str
    name: str
    postcode_prefixes: tuple[str, ...]


# Post-town substring -> authority, scanned in insertion order.
_POSTTOWN_PAIRS: Final[tuple[tuple[str, str], ...]] = (
    ("56 - 58 HIGH STREET", "Rhondda Cynon Taf"),
    ("ABERCARN", "Caerphilly"),
    ("ABERCYNON", "Rhondda Cynon Taf"),
    ("ABERDARE", "Rhondda Cynon Taf"),
    ("ABERFAN", "Merthyr Tydfil"),
    ("ABERGAVENNY", "Monmouthshire"),
    ("ABERGELE", "Conwy"),
    ("ABERTARE", "Rhondda Cynon Taf"),
    ("ABERTILLERY", "Blaenau Gwent"),
    ("ABERYSTWYTH", "Ceredigion"),
    ("ALLTAMI ROAD", "Flintshire"),
    ("ANGLESEY", "Isle of Anglesey"),
    ("BALA", "Gwynedd"),
    ("BANGOR", "Gwynedd"),
    ("BARGOED", "Monmouthshire"),
    ("BARMOUTH", "Gwynedd"),
    ("BARRY", "Vale of Glamorgan"),
    ("BENNLECH", "Isle of Anglesey"),
    ("BETHESDA", "Gwynedd"),
    ("BETWS Y COED", "Conwy"),
    ("BISHOPS WALK", "Denbighshire"),
    ("BLACKWOOD", "Caerphilly"),
    ("BLAENAU FFESTINIOG", "Gwynedd"),
    ("BLAENAVON", "Torfaen"),
    ("BLAINA", "Blaenau Gwent"),
    ("BORTH", "Ceredigion"),
    ("BRECON", "Powys"),
    ("BRIDGEND", "Bridgend"),
    ("BRITON FERRY", "Neath Port Talbot"),
    ("BROAD SHROAD COWBRIDGE", "Vale of Glamorgan"),
    ("BRUNEL WAY", "Neath Port Talbot"),
    ("BRYNHYFRYD", "Swansea"),
    ("BRYNMAWR", "Blaenau Gwent"),
    ("BUILTH WELLS", "Powys"),
    ("BURRY PORT", "Carmarthenshire"),
    ("CAERGWRLE WREXHAM", "Flintshire"),
    ("CAERLEON", "Newport"),
    ("CAERNARFON", "Gwynedd"),
    ("CAERPHILLY", "Caerphilly"),
    ("CALDICOT", "Monmouthshire"),
    ("CARDIFF", "Cardiff"),
    ("CARMARTHEN", "Carmarthenshire"),
    ("CEREDIGION", "Ceredigion"),
    ("CHEPSTOW", "Monmouthshire"),
    ("CHESTER", "Flintshire"),
    ("CHURCH VILLAGE", "Rhondda Cynon Taf"),
    ("CLYDACH", "Swansea"),
    ("COEDPOETH", "Wrexham"),
    ("COLWYN", "Denbighshire"),
    ("CONNAHS QUAY", "Flintshire"),
    ("CONWAY", "Conwy"),
    ("CONWY", "Conwy"),
    ("CORWEN", "Denbighshire"),
    ("COTTRELL STREET", "Merthyr Tydfil"),
    ("COWBRIDGE ROAD", "Cardiff"),
    ("COWBRIDGE", "Vale of Glamorgan"),
    ("CRUMLIN", "Caerphilly"),
    ("CRYMYCH", "Pembrokeshire"),
    ("CWMBRAN", "Torfaen"),
    ("CWMLLYNFELL", "Neath Port Talbot"),
    ("DEESIDE", "Flintshire"),
    ("DENBIGH", "Denbighshire"),
    ("DINAS POWYS", "Vale of Glamorgan"),
    ("DOLGELLAU", "Gwynedd"),
    ("EBBW", "Blaenau Gwent"),
    ("FFORESTFACH", "Swansea"),
    ("FLINTSHIRE", "Flintshire"),
    ("GABALFA", "Cardiff"),
    ("GAERWEN", "Isle of Anglesey"),
    ("GELLIGAER", "Caerphilly"),
    ("GLANRAFON", "Flintshire"),
    ("GOODWICK", "Pembrokeshire"),
    ("GRANGETOWN", "Cardiff"),
    ("GURWEN", "Neath Port Talbot"),
    ("GWENT", "Blaenau Gwent"),
    ("GWYNEDD", "Gwynedd"),
    ("GYFFIN", "Conwy"),
    ("HAVERFORDWEST", "Pembrokeshire"),
    ("HAWARDEN", "Flintshire"),
    ("HIGHTOWN", "Wrexham"),
    ("HOLYHEAD", "Isle of Anglesey"),
    ("HOLYWELL", "Flintshire"),
    ("HOPE WREXHAM", "Flintshire"),
    ("KINMEL BAY RHYL", "Denbighshire"),
    ("KNIGHTON", "Powys"),
    ("LAMPETER", "Ceredigion"),
    ("LANGDON", "Swansea"),
    ("LLANBERIS", "Gwynedd"),
    ("LLANDEILO", "Carmarthenshire"),
    ("LLANDRINDOD WELLS", "Powys"),
    ("LLANDUDNO", "Conwy"),
    ("LLANELLI", "Carmarthenshire"),
    ("LLANFAIRFECHAN", "Conwy"),
    ("LLANFYLLIN", "Powys"),
    ("LLANGOLLEN", "Denbighshire"),
    ("LLANHILLETH", "Blaenau Gwent"),
    ("LLANIDLOES", "Powys"),
    ("LLANRWST", "Conwy"),
    ("LLANSAMLET", "Swansea"),
    ("LLANTRISANT", "Rhondda Cynon Taf"),
    ("LLANTWIT", "Vale of Glamorgan"),
    ("LLWYNHENDY", "Carmarthenshire"),
    ("MACHYNLLETH", "Powys"),
    ("MAESTEG", "Bridgend"),
    ("MANCHESTER SQUARE", "Pembrokeshire"),
    ("MANSELTON", "Swansea"),
    ("MERTHYR TYDFIL", "Merthyr Tydfil"),
    ("MID GLAMORGAN", "Rhondda Cynon Taf"),
    ("MILFORD", "Pembrokeshire"),
    ("MIN Y NANT", "Powys"),
    ("MOLD", "Flintshire"),
    ("MONMOUTH", "Monmouthshire"),
    ("MONTGOMERY", "Powys"),
    ("MORRISTON", "Swansea"),
    ("MOUNTAIN ASH", "Rhondda Cynon Taf"),
    ("NEATH", "Neath Port Talbot"),
    ("NEFYN", "Gwynedd"),
    ("NELSON", "Caerphilly"),
    ("NEW TREDEGAR", "Caerphilly"),
    ("NEWBRIDGE", "Caerphilly"),
    ("NEWPORT", "Newport"),
    ("NEWTOWN", "Powys"),
    ("NEYLAND", "Pembrokeshire"),
    ("OLD COLWYN", "Conwy"),
    ("OVERTON ON DEE", "Wrexham"),
    ("PEMBROKE", "Pembrokeshire"),
    ("PENCLAWDD", "Swansea"),
    ("PENCOED", "Bridgend"),
    ("PENGAM GREEN", "Cardiff"),
    ("PENRHYNDEUDRAETH", "Gwynedd"),
    ("PENYGRAIG PORTH", "Rhondda Cynon Taf"),
    ("PENYGROES", "Gwynedd"),
    ("PLAS IONA", "Cardiff"),
    ("PONTYCLUN", "Rhondda Cynon Taf"),
    ("PONTYPOOL", "Torfaen"),
    ("PONTYPRIDD", "Rhondda Cynon Taf"),
    ("PORT TALBOT", "Neath Port Talbot"),
    ("PORTHMADOG", "Gwynedd"),
    ("POWYS", "Powys"),
    ("PRESTATYN", "Denbighshire"),
    ("PRESTEIGNE", "Powys"),
    ("PWLLHELI", "Gwynedd"),
    ("QUEENSFERRY", "Flintshire"),
    ("RAGLAN", "Monmouthshire"),
    ("RHAYADER", "Powys"),
    ("RHONDDA", "Rhondda Cynon Taf"),
    ("RHUDDLAN", "Denbighshire"),
    ("RHYL", "Denbighshire"),
    ("RHYMNEY", "Caerphilly"),
    ("RISCA", "Caerphilly"),
    ("RUMNEY", "Cardiff"),
    ("RUTHIN", "Denbighshire"),
    ("SAINT THOMAS GREEN", "Pembrokeshire"),
    ("SCHOOL ROAD", "Wrexham"),
    ("SCURLAGE", "Swansea"),
    ("SEVEN SISTERS", "Neath Port Talbot"),
    ("SINGLETON", "Swansea"),
    ("SPLOTT", "Cardiff"),
    ("ST ASAPH", "Denbighshire"),
    ("SULLY", "Vale of Glamorgan"),
    ("SWANSEA", "Swansea"),
    ("TAFFS WELL", "Rhondda Cynon Taf"),
    ("TALIESYN COURT", "Ceredigion"),
    ("TENBY", "Pembrokeshire"),
    ("THE OLD POLICE STATION TINTERN", "Monmouthshire"),
    ("THOMAS STREET", "Carmarthenshire"),
    ("TONYFELIN", "Caerphilly"),
    ("TONYPANDY", "Rhondda Cynon Taf"),
    ("TONYREFAIL", "Rhondda Cynon Taf"),
    ("TORFAEN", "Torfaen"),
    ("TREDEGAR", "Blaenau Gwent"),
    ("TREHARRIS", "Merthyr Tydfil"),
    ("TROEDYRHIW", "Merthyr Tydfil"),
    ("TYNEWYDD", "Rhondda Cynon Taf"),
    ("TYWYN", "Gwynedd"),
    ("UNIT 22 LAWN INDUSTRIAL ESTATE", "Caerphilly"),
    ("UPLANDS", "Swansea"),
    ("USK", "Monmouthshire"),
    ("VALE OF GLAMORGAN", "Vale of Glamorgan"),
    ("VALE", "Glamorgan"),
    ("WELSHPOOL", "Powys"),
    ("WESTERN VALLEY RD ROGERSTONE", "Newport"),
    ("WHITE ROSE WAY", "Caerphilly"),
    ("WREXHAM", "Wrexham"),
    ("Y FELINHELI", "Gwynedd"),
    ("YNYS MON", "Isle of Anglesey"),
    ("YSTRAD MYNACH", "Caerphilly"),
    ("YSTRADGYNLAIS", "Powys"),
    ("YYNYSYBWL", "Rhondda Cynon Taf"),
)

POSTTOWN_TO_COUNTY: Final = MappingProxyType(
    {town.lower(): county for town, county in _POSTTOWN_PAIRS}
)

# Substring rules tested against the free-text county, in order.
COUNTY_RULES: Final[tuple[tuple[str, str], ...]] = (
    ("CWMBRAN", "Torfaen"),
    ("TORFAEN", "Torfaen"),
    ("PONTYPOOL", "Torfaen"),
    ("YSTRAD MYNACH", "Caerphilly"),
    ("ABERTILLERY", "Blaenau Gwent"),
    ("YNYS MON", "Isle of Anglesey"),
    ("PEMBROKESHIRE", "Pembrokeshire"),
    ("CONWY", "Conwy"),
    ("CONWAY", "Conwy"),
    ("MERTHYR TYDFIL", "Merthyr Tydfil"),
    ("POWYS", "Powys"),
    ("FLINTSHIRE", "Flintshire"),
    ("MOLD", "Flintshire"),
    ("NEW TREDEGAR", "Caerphilly"),
    ("TREDEGAR", "Blaenau Gwent"),
    ("CARDIFF", "Cardiff"),
    ("CHURCH VILLAGE", "Rhondda Cynon Taf"),
    ("PORT TALBOT", "Neath Port Talbot"),
    ("DENBIGH", "Denbighshire"),
    ("BORTH", "Ceredigion"),
    ("CEREDIGION", "Ceredigion"),
    ("SWANSEA", "Swansea"),
    ("PRESTATYN", "Flintshire"),
    ("LLANELLI", "Carmarthenshire"),
    ("MAESTEG", "Bridgend"),
    ("HAVERFORDWEST", "Pembrokeshire"),
    ("LLANGOLLEN", "Denbighshire"),
    ("COLWYN", "Denbighshire"),
    ("CARMARTHEN", "Carmarthenshire"),
    ("RHYL", "Denbighshire"),
    ("PEMBROKE", "Pembrokeshire"),
    ("GWYNEDD", "Gwynedd"),
    ("ABERGELE", "Conwy"),
    ("BRITON FERRY", "Neath Port Talbot"),
    ("PONTYPRIDD", "Rhondda Cynon Taf"),
    ("PENCOED", "Bridgend"),
    ("MONMOUTHSHIRE", "Monmouthshire"),
    ("NEATH", "Neath Port Talbot"),
    ("BLACKWOOD", "Caerphilly"),
    ("CAERLEON", "Newport"),
    ("NEWPORT", "Newport"),
    ("LAMPETER", "Ceredigion"),
    ("CRYMYCH", "Pembrokeshire"),
    ("ABERFAN", "Merthyr Tydfil"),
    ("WREXHAM", "Wrexham"),
    ("HOLYHEAD", "Isle of Anglesey"),
    ("CHEPSTOW", "Monmouthshire"),
    ("RHYMNEY", "Caerphilly"),
    ("ANGLESEY", "Isle of Anglesey"),
    ("NEWBRIDGE", "Caerphilly"),
    ("DEESIDE", "Flintshire"),
    ("BRYNMAWR", "Blaenau Gwent"),
    ("RHONDDA CYNON TAFF", "Rhondda Cynon Taf"),
    ("MILFORD", "Pembrokeshire"),
    ("VALE OF GLAMORGAN", "Vale of Glamorgan"),
    ("BARRY", "Vale of Glamorgan"),
    ("SULLY", "Vale of Glamorgan"),
    ("FERNDALE", "Rhondda Cynon Taf"),
)

WELSH_COUNTIES: Final[tuple[CountyRecord, ...]] = (
    CountyRecord(
        "W06000001",
        "Isle of Anglesey",
        ("LL58", "LL59", "LL60", "LL61", "LL62", "LL64", "LL65", "LL66", "LL67", "LL68",
         "LL69", "LL70", "LL71", "LL72", "LL73", "LL74", "LL75", "LL76", "LL77", "LL78"),
    ),
    CountyRecord("W06000019", "Blaenau Gwent", ("NP2", "NP3", "NP23")),
    CountyRecord("W06000013", "Bridgend", ("CF31", "CF32", "CF33", "CF34", "CF35", "CF36")),
    CountyRecord("W06000018", "Caerphilly", ("CF46", "CF81", "CF82", "CF83", "NP11")),
    CountyRecord("W06000015", "Cardiff", ("CF3", "CF5", "CF83")),
    CountyRecord(
        "W06000010",
        "Carmarthenshire",
        ("SA4", "SA14", "SA15", "SA16", "SA17", "SA18", "SA19", "SA20", "SA31", "SA32",
         "SA33", "SA34", "SA38", "SA39", "SA40", "SA44", "SA48", "SA66"),
    ),
    CountyRecord(
        "W06000008",
        "Ceredigion",
        ("SA38", "SA40", "SA43", "SA44", "SA45", "SA46", "SA47", "SA48", "SY20", "SY23",
         "SY24", "SY25"),
    ),
    CountyRecord(
        "W06000003",
        "Conwy",
        ("LL16", "LL21", "LL22", "LL24", "LL25", "LL26", "LL27", "LL28", "LL29", "LL30",
         "LL31", "LL32", "LL33", "LL34", "LL57"),
    ),
    CountyRecord(
        "W06000004",
        "Denbighshire",
        ("CH7", "LL11", "LL15", "LL16", "LL17", "LL18", "LL19", "LL20", "LL21", "LL22"),
    ),
    CountyRecord(
        "W06000005",
        "Flintshire",
        ("CH1", "CH4", "CH5", "CH6", "CH7", "CH8", "LL11", "LL12", "LL18", "LL19"),
    ),
    CountyRecord(
        "W06000014",
        "Vale of Glamorgan",
        ("CF1", "CF5", "CF32", "CF35", "CF61", "CF62", "CF63", "CF64", "CF71"),
    ),
    CountyRecord(
        "W06000002",
        "Gwynedd",
        ("LL21", "LL23", "LL33", "LL35", "LL36", "LL37", "LL38", "LL39", "LL40", "LL41",
         "LL42", "LL43", "LL44", "LL45", "LL46", "LL47", "LL48", "LL49", "LL51", "LL52",
         "LL53", "LL54", "LL55", "LL57", "SY20"),
    ),
    CountyRecord("W06000024", "Merthyr Tydfil", ("CF46", "CF47", "CF48")),
    CountyRecord("W06000021", "Monmouthshire", ("NP4", "NP6", "NP7")),
    CountyRecord(
        "W06000012",
        "Neath Port Talbot",
        ("SA8", "SA9", "SA10", "SA11", "SA12", "SA13", "SA18"),
    ),
    CountyRecord(
        "W06000022",
        "Newport",
        ("CF3", "NP1", "NP2", "NP3", "NP10", "NP19", "NP20"),
    ),
    CountyRecord(
        "W06000009",
        "Pembrokeshire",
        ("SA34", "SA35", "SA36", "SA37", "SA41", "SA42", "SA43", "SA61", "SA62", "SA63",
         "SA64", "SA65", "SA66", "SA67", "SA68", "SA69", "SA70", "SA71", "SA72", "SA73"),
    ),
    CountyRecord(
        "W06000023",
        "Powys",
        ("CF44", "CF48", "HR3", "HR5", "LD1", "LD2", "LD3", "LD4", "LD5", "LD6", "LD7",
         "LD8", "NP7", "NP8", "SA9", "SA10", "SY5", "SY10", "SY15", "SY16", "SY17", "SY18",
         "SY19", "SY20", "SY21", "SY22"),
    ),
    CountyRecord(
        "W06000016",
        "Rhondda Cynon Taf",
        ("CF37", "CF38", "CF39", "CF40", "CF41", "CF42", "CF43", "CF44", "CF45", "CF72"),
    ),
    CountyRecord(
        "W06000011",
        "Swansea",
        ("SA1", "SA2", "SA3", "SA4", "SA5", "SA6", "SA7", "SA18"),
    ),
    CountyRecord("W06000020", "Torfaen", ("NP4", "NP44")),
    CountyRecord(
        "W06000006",
        "Wrexham",
        ("LL11", "LL12", "LL13", "LL14", "LL20", "SY13", "SY14"),
    ),
)

COUNTY_CODES: Final = MappingProxyType({record.name: record.code for record in WELSH_COUNTIES})
