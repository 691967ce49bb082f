"""Field-mapping tables per (source system, entity type).

Each table is an ordered tuple of MappingEntry. Later entries may overwrite
earlier targets. Systems:
- SAP: ECC / S/4HANA table fields (MARA, KNA1, LFA1, SKA1, VBAK, ...)
- INFOR_LN: LN table fields (tcibd001, tccom100, tfgld008, ...)
- INFOR_M3: M3 table fields (MITMAS, OCUSMA, CIDMAS, FCHACC)
- INFOR_CSI: CloudSuite Industrial (SyteLine) IDO properties
- INFOR_LAWSON: Lawson field names
"""

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from core.mapping.converters import code_map, flag_map, to_float
from core.mapping.entry import MappingEntry as _m

MappingTable = Tuple[_m, ...]


# =============================================================================
# SAP ECC / S/4HANA
# =============================================================================

_SAP_ADDRESS = (
    _m("NAME1", "name"),
    _m("NAME2", "name2"),
    _m("SORTL", "searchTerm"),
    _m("STRAS", "street"),
    _m("ORT01", "city"),
    _m("PSTLZ", "postalCode"),
    _m("LAND1", "country"),
    _m("REGIO", "region"),
    _m("TELF1", "phone"),
    _m("SMTP_ADDR", "email"),
    _m("STCEG", "taxNumber"),
    _m("ZTERM", "paymentTerms"),
    _m("WAERS", "currency"),
)

SAP_MAPPINGS: Dict[str, MappingTable] = {
    # MARA + MAKT + MARC
    "Item": (
        _m("MATNR", "itemId"),
        _m("MAKTX", "description"),
        _m("MEINS", "baseUom"),
        _m("MTART", "itemType"),
        _m("MATKL", "itemGroup"),
        _m("BRGEW", "grossWeight", to_float),
        _m("NTGEW", "netWeight", to_float),
        _m("GEWEI", "weightUnit"),
        _m("VOLUM", "volume", to_float),
        _m("VOLEH", "volumeUnit"),
        _m("WRKST", "materialGroup"),
        _m("EKGRP", "purchaseGroup"),
        _m("DISMM", "mrpType"),
        _m("DISLS", "lotSize"),
        _m("EISBE", "safetyStock", to_float),
    ),
    # KNA1 + KNVV
    "Customer": (
        _m("KUNNR", "customerId"),
        *_SAP_ADDRESS,
        _m("KTOKD", "accountGroup"),
        _m("VKORG", "salesOrg"),
        _m("VTWEG", "distributionChannel"),
    ),
    # LFA1 + LFM1
    "Vendor": (
        _m("LIFNR", "vendorId"),
        *_SAP_ADDRESS,
        _m("KTOKK", "accountGroup"),
        _m("EKORG", "purchaseOrg"),
    ),
    # SKA1 + SKAT + SKB1
    "ChartOfAccounts": (
        _m("SAKNR", "accountNumber"),
        _m("TXT50", "description"),
        _m("GVTYP", "accountType", flag_map("X", "BS", "PL")),
        _m("KTOKS", "accountGroup"),
        _m("XBILK", "balanceSheetIndicator"),
        _m("ERTYP", "plStatementType"),
        _m("WAERS", "currency"),
        _m("MWSKZ", "taxCategory"),
        _m("MITKZ", "reconciliationType"),
    ),
    # VBAK
    "SalesOrder": (
        _m("VBELN", "orderNumber"),
        _m("AUART", "orderType"),
        _m("KUNNR", "customerNumber"),
        _m("BSTNK", "purchaseOrderNumber"),
        _m("AUDAT", "orderDate"),
        _m("VDATU", "requestedDeliveryDate"),
        _m("WAERK", "currency"),
        _m("VKORG", "salesOrg"),
        _m("VTWEG", "distributionChannel"),
        _m("SPART", "division"),
    ),
    # EKKO
    "PurchaseOrder": (
        _m("EBELN", "orderNumber"),
        _m("BSART", "orderType"),
        _m("LIFNR", "vendorNumber"),
        _m("BEDAT", "orderDate"),
        _m("WAERS", "currency"),
        _m("EKORG", "purchaseOrg"),
        _m("EKGRP", "purchaseGroup"),
        _m("BUKRS", "companyCode"),
    ),
    # AUFK + AFKO
    "ProductionOrder": (
        _m("AUFNR", "orderNumber"),
        _m("AUART", "orderType"),
        _m("MATNR", "materialNumber"),
        _m("GAMNG", "quantity", to_float),
        _m("GMEIN", "unit"),
        _m("GSTRP", "startDate"),
        _m("GLTRP", "endDate"),
        _m("WERKS", "plant"),
        _m("STAT", "status"),
        _m("PLNNR", "routingNumber"),
        _m("STLNR", "bomNumber"),
    ),
    # MARD
    "Inventory": (
        _m("MATNR", "materialNumber"),
        _m("WERKS", "plant"),
        _m("LGORT", "storageLocation"),
        _m("CHARG", "batch"),
        _m("LABST", "quantity", to_float),
        _m("MEINS", "unit"),
        _m("INSMK", "qualityStatus"),
        _m("SOBKZ", "specialStock"),
    ),
    # BKPF
    "GlEntry": (
        _m("BELNR", "documentNumber"),
        _m("BUKRS", "companyCode"),
        _m("GJAHR", "fiscalYear"),
        _m("BUDAT", "postingDate"),
        _m("BLDAT", "documentDate"),
        _m("BLART", "documentType"),
        _m("WAERS", "currency"),
        _m("XBLNR", "referenceNumber"),
        _m("BKTXT", "headerText"),
    ),
    # PA0001 + PA0002 + PA0105
    "Employee": (
        _m("PERNR", "employeeId"),
        _m("VORNA", "firstName"),
        _m("NACHN", "lastName"),
        _m("ENAME", "fullName"),
        _m("WERKS", "personnelArea"),
        _m("BTRTL", "personnelSubarea"),
        _m("PERSG", "employeeGroup"),
        _m("PERSK", "employeeSubgroup"),
        _m("PLANS", "position"),
        _m("STELL", "jobTitle"),
        _m("ORGEH", "orgUnit"),
        _m("KOSTL", "costCenter"),
        _m("BEGDA", "startDate"),
        _m("USRID_LONG", "email"),
    ),
    # STKO + MAST
    "Bom": (
        _m("STLNR", "bomNumber"),
        _m("MATNR", "materialNumber"),
        _m("WERKS", "plant"),
        _m("STLAN", "bomUsage"),
        _m("BMENG", "baseQuantity", to_float),
        _m("BMEIN", "baseUnit"),
        _m("DATUV", "validFrom"),
        _m("DATUB", "validTo"),
    ),
    # PLKO + MAPL
    "Routing": (
        _m("PLNNR", "routingNumber"),
        _m("MATNR", "materialNumber"),
        _m("WERKS", "plant"),
        _m("VERWE", "routingUsage"),
    ),
    # ANLA + ANLZ
    "FixedAsset": (
        _m("ANLN1", "assetNumber"),
        _m("ANLN2", "assetSubnumber"),
        _m("TXA50", "description"),
        _m("ANLKL", "assetClass"),
        _m("AKTIV", "capitalizationDate"),
        _m("DEAKT", "deactivationDate"),
        _m("BUKRS", "companyCode"),
        _m("KOSTL", "costCenter"),
        _m("MENGE", "quantity", to_float),
        _m("SERNR", "serialNumber"),
        _m("INVNR", "inventoryNumber"),
    ),
    # CSKS + CSKT
    "CostCenter": (
        _m("KOSTL", "costCenterId"),
        _m("KTEXT", "description"),
        _m("VERAK", "responsiblePerson"),
        _m("KOSAR", "costCenterCategory"),
        _m("BUKRS", "companyCode"),
        _m("KOKRS", "controllingArea"),
        _m("PRCTR", "profitCenter"),
        _m("DATAB", "validFrom"),
        _m("DATBI", "validTo"),
        _m("WAERS", "currency"),
    ),
}


# =============================================================================
# Infor LN
# =============================================================================

_LN_BUSINESS_PARTNER = (
    _m("T$NAMA", "name"),
    _m("T$NAMB", "name2"),
    _m("T$SEAK", "searchTerm"),
    _m("T$LNAD", "street"),
    _m("T$LNCI", "city"),
    _m("T$LNPC", "postalCode"),
    _m("T$LNCC", "country"),
    _m("T$LNST", "region"),
    _m("T$TELP", "phone"),
    _m("T$EMAL", "email"),
    _m("T$FOVN", "taxNumber"),
    _m("T$CPAY", "paymentTerms"),
    _m("T$CCUR", "currency"),
)

INFOR_LN_MAPPINGS: Dict[str, MappingTable] = {
    # tcibd001
    "Item": (
        _m("T$ITEM", "itemId"),
        _m("T$DSCA", "description"),
        _m("T$CUNI", "baseUom"),
        _m("T$CTYP", "itemType", code_map({"1": "FERT", "2": "HALB", "3": "ROH", "4": "HIBE"})),
        _m("T$CITG", "itemGroup"),
        _m("T$GRWE", "grossWeight", to_float),
        _m("T$NEWE", "netWeight", to_float),
        _m("T$WUNI", "weightUnit"),
    ),
    # tccom100 / tccom110
    "Customer": (_m("T$BPID", "customerId"), *_LN_BUSINESS_PARTNER),
    # tccom100 / tccom120
    "Vendor": (_m("T$BPID", "vendorId"), *_LN_BUSINESS_PARTNER),
    # tfgld008
    "ChartOfAccounts": (
        _m("T$LEAC", "accountNumber"),
        _m("T$DESC", "description"),
        _m("T$ACTP", "accountType", code_map({"1": "BS", "2": "PL"})),
        _m("T$AGRP", "accountGroup"),
        _m("T$CCUR", "currency"),
        _m("T$TAXC", "taxCategory"),
    ),
}


# =============================================================================
# Infor M3
# =============================================================================

INFOR_M3_MAPPINGS: Dict[str, MappingTable] = {
    # MITMAS
    "Item": (
        _m("MMITNO", "itemId"),
        _m("MMITDS", "description"),
        _m("MMUNMS", "baseUom"),
        _m("MMITTY", "itemType", code_map({"10": "FERT", "20": "HALB", "30": "ROH", "50": "HIBE"})),
        _m("MMITGR", "itemGroup"),
        _m("MMGRWE", "grossWeight", to_float),
        _m("MMNEWE", "netWeight", to_float),
        _m("MMWUOM", "weightUnit"),
        _m("MMVOL3", "volume", to_float),
        _m("MMVUOM", "volumeUnit"),
    ),
    # OCUSMA
    "Customer": (
        _m("OKCUNO", "customerId"),
        _m("OKCUNM", "name"),
        _m("OKCUN2", "name2"),
        _m("OKALCU", "searchTerm"),
        _m("OKCUA1", "street"),
        _m("OKTOWN", "city"),
        _m("OKPONO", "postalCode"),
        _m("OKCSCD", "country"),
        _m("OKECAR", "region"),
        _m("OKPHNO", "phone"),
        _m("OKMAIL", "email"),
        _m("OKTEPY", "paymentTerms"),
        _m("OKCUCD", "currency"),
    ),
    # CIDMAS
    "Vendor": (
        _m("IISUNO", "vendorId"),
        _m("IISUNM", "name"),
        _m("IISUN2", "name2"),
        _m("IIALSU", "searchTerm"),
        _m("IISUA1", "street"),
        _m("IITOWN", "city"),
        _m("IIPONO", "postalCode"),
        _m("IICSCD", "country"),
        _m("IIECAR", "region"),
        _m("IIPHNO", "phone"),
        _m("IIMAIL", "email"),
        _m("IITEPY", "paymentTerms"),
        _m("IICUCD", "currency"),
    ),
    # FCHACC
    "ChartOfAccounts": (
        _m("AIAITM", "accountNumber"),
        _m("AIAITX", "description"),
        _m("AIAITT", "accountType", code_map({"1": "BS", "2": "PL"})),
        _m("AIAIGR", "accountGroup"),
        _m("AICUCD", "currency"),
    ),
}


# =============================================================================
# Infor CloudSuite Industrial (SyteLine)
# =============================================================================

_CSI_PARTNER = (
    _m("Name", "name"),
    _m("Addr1", "street"),
    _m("City", "city"),
    _m("Zip", "postalCode"),
    _m("Country", "country"),
    _m("State", "region"),
    _m("Phone", "phone"),
    _m("Email", "email"),
    _m("TermsCode", "paymentTerms"),
    _m("CurrCode", "currency"),
)

INFOR_CSI_MAPPINGS: Dict[str, MappingTable] = {
    # SLItems
    "Item": (
        _m("Item", "itemId"),
        _m("Description", "description"),
        _m("UM", "baseUom"),
        _m("ProductCode", "itemType"),
        _m("ItemGroup", "itemGroup"),
        _m("UnitWeight", "grossWeight", to_float),
        _m("NetWeight", "netWeight", to_float),
        _m("WeightUnits", "weightUnit"),
    ),
    # SLCustomers
    "Customer": (_m("CustNum", "customerId"), *_CSI_PARTNER),
    # SLVendors
    "Vendor": (_m("VendNum", "vendorId"), *_CSI_PARTNER),
    # SLChartOfAccounts
    "ChartOfAccounts": (
        _m("Acct", "accountNumber"),
        _m("Description", "description"),
        _m("Type", "accountType", code_map({"B": "BS", "P": "PL"})),
        _m("AcctGroup", "accountGroup"),
        _m("CurrCode", "currency"),
    ),
}


# =============================================================================
# Infor Lawson
# =============================================================================

_LAWSON_PARTNER = (
    _m("NAME", "name"),
    _m("ADDRESS-1", "street"),
    _m("CITY", "city"),
    _m("POSTAL-CODE", "postalCode"),
    _m("COUNTRY", "country"),
    _m("STATE", "region"),
    _m("PHONE-NUMBER", "phone"),
    _m("EMAIL-ADDRESS", "email"),
    _m("PAY-TERMS", "paymentTerms"),
    _m("CURRENCY", "currency"),
)

INFOR_LAWSON_MAPPINGS: Dict[str, MappingTable] = {
    # ICITEM
    "Item": (
        _m("ITEM-NUMBER", "itemId"),
        _m("DESCRIPTION", "description"),
        _m("UM", "baseUom"),
        _m("ITEM-TYPE", "itemType"),
        _m("ITEM-GROUP", "itemGroup"),
        _m("WEIGHT", "grossWeight", to_float),
        _m("WEIGHT-UM", "weightUnit"),
    ),
    # ARCUSTOMER
    "Customer": (_m("CUSTOMER", "customerId"), *_LAWSON_PARTNER),
    # APVENMAST
    "Vendor": (_m("VENDOR", "vendorId"), *_LAWSON_PARTNER),
    # GLCHART
    "ChartOfAccounts": (
        _m("ACCOUNT", "accountNumber"),
        _m("DESCRIPTION", "description"),
        _m("ACCOUNT-TYPE", "accountType", code_map({"B": "BS", "P": "PL", "R": "PL"})),
        _m("ACCOUNT-GROUP", "accountGroup"),
        _m("CURRENCY", "currency"),
    ),
}


SOURCE_MAPPINGS: Mapping[str, Mapping[str, MappingTable]] = MappingProxyType({
    "SAP": MappingProxyType(SAP_MAPPINGS),
    "INFOR_LN": MappingProxyType(INFOR_LN_MAPPINGS),
    "INFOR_M3": MappingProxyType(INFOR_M3_MAPPINGS),
    "INFOR_CSI": MappingProxyType(INFOR_CSI_MAPPINGS),
    "INFOR_LAWSON": MappingProxyType(INFOR_LAWSON_MAPPINGS),
})
