# app/models/enums/master_category.py
import enum


class MasterCategory(str, enum.Enum):
    TYPE = "TYPE"
    OWNERSHIP = "OWNERSHIP"
    CUSTOMER = "CUSTOMER"
    AGENT = "AGENT"
    COUNTRY = "COUNTRY"
    PORT = "PORT"
    AREA = "AREA"
    EXCHANGE = "EXCHANGE"
    INCOTERM = "INCOTERM"
    SALES = "SALES"
    MANAGER = "MANAGER"


class MasterOptionSource(str, enum.Enum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
