"""Catalog metadata that drives the checks.

For each catalog table we list the columns we care about: the server
versions in which the column exists, whether it exists only on EnterpriseDB,
whether it is part of the table's key, whether it should be shown to
identify a row in diagnostics, and which check (if any) applies to it.

Some columns carry no check at all because they are part of the key: other
tables hold OIDs that must be looked up here.  We do not bother declaring the
key for tables nobody looks rows up in, since building an index for them
would be wasted work.

Versions use the server_version_num format (90600 = 9.6, 100000 = 10).
``max_version`` is exclusive; 0 means unbounded.
"""

from __future__ import annotations

from pg_catcheck.catalog import CheckSpec, ColumnSpec, TableSpec


def _oid(table: str) -> CheckSpec:
    return CheckSpec("oid", references=table)


def _optional_oid(table: str) -> CheckSpec:
    return CheckSpec("oid", references=table, zero_ok=True)


def _oid_vector(table: str, zero_ok: bool = False) -> CheckSpec:
    return CheckSpec("oid_vector", references=table, zero_ok=zero_ok)


def _oid_array(table: str, zero_ok: bool = False) -> CheckSpec:
    return CheckSpec("oid_array", references=table, zero_ok=zero_ok)


ATTNUM = CheckSpec("attnum")
RELNATTS = CheckSpec("relnatts")
DEPENDENCY_CLASS_ID = CheckSpec("dependency_class_id")
DEPENDENCY_ID = CheckSpec("dependency_id")
DEPENDENCY_SUBID = CheckSpec("dependency_subid")

_REGPROC = "pg_catalog.oid"


def _key(name: str, check: CheckSpec | None = None, **kwargs) -> ColumnSpec:
    """A key column, always displayed."""
    return ColumnSpec(name, key=True, display=True, check=check, **kwargs)


def _col(name: str, check: CheckSpec | None = None, **kwargs) -> ColumnSpec:
    return ColumnSpec(name, check=check, **kwargs)


def _table(name: str, *columns: ColumnSpec) -> TableSpec:
    return TableSpec(name, tuple(columns))


CATALOG_TABLES: tuple[TableSpec, ...] = (
    _table(
        "pg_class",
        _key("oid"),
        _col("relowner", _oid("pg_authid")),
        _col("relnamespace", _oid("pg_namespace")),
        _col("relname", display=True),
        _col("reltype", _optional_oid("pg_type")),
        _col("reloftype", _optional_oid("pg_type"), min_version=90000),
        _col("relkind", display=True),
        _col("relam", _optional_oid("pg_am")),
        _col("relnatts", RELNATTS),
        _col("reltablespace", _optional_oid("pg_tablespace")),
        _col("reltoastrelid", _optional_oid("pg_class")),
    ),
    _table(
        "pg_namespace",
        _key("oid"),
        _col("nspowner", _oid("pg_authid")),
        _col("nspparent", _optional_oid("pg_namespace"), edb_only=True),
        _col("nspobjecttype", _optional_oid("pg_type"), min_version=90200, edb_only=True),
        _col("nspforeignserver", _optional_oid("pg_foreign_server"), edb_only=True),
    ),
    _table(
        "pg_authid",
        _key("oid"),
        _col("rolname", display=True),
        _col("rolprofile", _optional_oid("edb_profile"), min_version=90500, edb_only=True),
    ),
    _table(
        "pg_tablespace",
        _key("oid"),
        _col("spcname"),
        _col("spcowner", _oid("pg_authid")),
    ),
    _table(
        "pg_type",
        _key("oid"),
        _col("typname"),
        _col("typowner", _oid("pg_authid")),
        _col("typnamespace", _oid("pg_namespace")),
        _col("typrelid", _optional_oid("pg_class")),
        _col("typelem", _optional_oid("pg_type")),
        _col("typarray", _optional_oid("pg_type")),
        _col("typbasetype", _optional_oid("pg_type")),
        _col("typcollation", _optional_oid("pg_collation"), min_version=90100),
    ),
    _table(
        "pg_am",
        _key("oid"),
        _col("amkeytype", _optional_oid("pg_type"), max_version=90600),
    ),
    _table(
        "pg_collation",
        _key("oid", min_version=90100),
        _col("collnamespace", _oid("pg_namespace"), min_version=90100),
        _col("collowner", _oid("pg_authid"), min_version=90100),
    ),
    _table(
        "pg_proc",
        _key("oid"),
        _col("pronamespace", _oid("pg_namespace")),
        _col("proowner", _oid("pg_authid")),
        _col("prolang", _oid("pg_language")),
        _col("provariadic", _optional_oid("pg_type")),
        _col("prorettype", _oid("pg_type")),
        _col("proargtypes", _oid_vector("pg_type")),
        _col("proallargtypes", _oid_array("pg_type")),
    ),
    _table(
        "pg_language",
        _key("oid"),
        _col("lanowner", _oid("pg_authid")),
        _col("lanplcallfoid"),
        _col("laninline", min_version=90000),
        _col("lanvalidator"),
    ),
    _table(
        "pg_index",
        _key("indexrelid"),
        _col("indrelid", _oid("pg_class")),
        _col("indcollation", _oid_vector("pg_collation", zero_ok=True), min_version=90100),
        _col("indclass", _oid_vector("pg_opclass")),
    ),
    _table(
        "pg_constraint",
        _key("oid"),
        _col("conname"),
        _col("connamespace", _oid("pg_namespace")),
        _col("conrelid", _optional_oid("pg_class")),
        _col("contypid", _optional_oid("pg_type")),
        _col("conindid", _optional_oid("pg_index"), min_version=90000),
        _col("confrelid", _optional_oid("pg_class")),
        _col("conpfeqop", _oid_array("pg_operator")),
        _col("conppeqop", _oid_array("pg_operator")),
        _col("conffeqop", _oid_array("pg_operator")),
        _col("conexclop", _oid_array("pg_operator"), min_version=90000),
    ),
    _table(
        "pg_database",
        _key("oid"),
        _col("datname"),
        _col("datdba", _oid("pg_authid")),
        _col("dattablespace", _oid("pg_tablespace")),
    ),
    _table(
        "pg_cast",
        _key("oid"),
        _col("castsource", _oid("pg_type")),
        _col("casttarget", _oid("pg_type")),
        _col("castfunc", _optional_oid("pg_proc")),
    ),
    _table(
        "pg_conversion",
        _key("oid"),
        _col("connamespace", _oid("pg_namespace")),
        _col("conowner", _oid("pg_authid")),
        _col("conproc", _oid("pg_proc"), cast=_REGPROC),
    ),
    _table(
        "pg_extension",
        _key("oid", min_version=90100),
        _col("extowner", _oid("pg_authid"), min_version=90100),
        _col("extnamespace", _oid("pg_namespace"), min_version=90100),
        _col("extconfig", _oid_array("pg_class"), min_version=90100),
    ),
    _table(
        "pg_enum",
        _key("oid"),
        _col("enumtypid", _oid("pg_type")),
    ),
    _table(
        "pg_trigger",
        _key("oid"),
        _col("tgrelid", _oid("pg_class")),
        _col("tgfoid", _oid("pg_proc")),
        _col("tgconstrrelid", _optional_oid("pg_class")),
        _col("tgconstrindid", _optional_oid("pg_index"), min_version=90000),
        _col("tgconstraint", _optional_oid("pg_constraint")),
    ),
    _table(
        "pg_ts_parser",
        _key("oid"),
        _col("prsnamespace", _oid("pg_namespace")),
        _col("prsstart", _oid("pg_proc"), cast=_REGPROC),
        _col("prstoken", _oid("pg_proc"), cast=_REGPROC),
        _col("prsend", _oid("pg_proc"), cast=_REGPROC),
        _col("prsheadline", _oid("pg_proc"), cast=_REGPROC),
        _col("prslextype", _oid("pg_proc"), cast=_REGPROC),
    ),
    _table(
        "pg_ts_config",
        _key("oid"),
        _col("cfgowner", _oid("pg_authid")),
        _col("cfgnamespace", _oid("pg_namespace")),
        _col("cfgparser", _optional_oid("pg_ts_parser")),
    ),
    _table(
        "pg_ts_template",
        _key("oid"),
        _col("tmplnamespace", _oid("pg_namespace")),
        _col("tmplinit", _oid("pg_proc"), cast=_REGPROC),
        _col("tmpllexize", _oid("pg_proc"), cast=_REGPROC),
    ),
    _table(
        "pg_ts_dict",
        _key("oid"),
        _col("dictnamespace", _oid("pg_namespace")),
        _col("dictowner", _oid("pg_authid")),
        _col("dicttemplate", _optional_oid("pg_ts_template")),
    ),
    _table(
        "pg_foreign_data_wrapper",
        _key("oid"),
        _col("fdwowner", _oid("pg_authid")),
        _col("fdwhandler", _optional_oid("pg_proc"), min_version=90100),
        _col("fdwvalidator", _optional_oid("pg_proc")),
    ),
    _table(
        "pg_foreign_server",
        _key("oid"),
        _col("srvowner", _oid("pg_authid")),
        _col("srvfdw", _oid("pg_foreign_data_wrapper")),
    ),
    _table(
        "pg_user_mapping",
        _key("oid"),
        _col("umuser", _optional_oid("pg_authid")),
        _col("umserver", _oid("pg_foreign_server")),
    ),
    _table(
        "pg_foreign_table",
        _key("ftrelid", _oid("pg_class"), min_version=90100),
        _col("ftserver", _oid("pg_foreign_server"), min_version=90100),
    ),
    _table(
        "pg_event_trigger",
        _key("oid", min_version=90300),
        _col("evtowner", _oid("pg_authid"), min_version=90300),
        _col("evtfoid", _oid("pg_proc"), min_version=90300),
    ),
    _table(
        "pg_opfamily",
        _key("oid"),
        _col("opfname"),
        _col("opfmethod", _oid("pg_am")),
        _col("opfnamespace", _oid("pg_namespace")),
        _col("opfowner", _oid("pg_authid")),
    ),
    _table(
        "pg_opclass",
        _key("oid"),
        _col("opcname"),
        _col("opcmethod", _oid("pg_am")),
        _col("opcnamespace", _oid("pg_namespace")),
        _col("opcowner", _oid("pg_authid")),
        _col("opcfamily", _oid("pg_opfamily")),
        _col("opcintype", _oid("pg_type")),
        _col("opckeytype", _optional_oid("pg_type")),
    ),
    _table(
        "pg_operator",
        _key("oid"),
        _col("oprname"),
        _col("oprnamespace", _oid("pg_namespace")),
        _col("oprowner", _oid("pg_authid")),
        _col("oprleft", _optional_oid("pg_type")),
        _col("oprright", _optional_oid("pg_type")),
        _col("oprresult", _optional_oid("pg_type")),
        _col("oprcom", _optional_oid("pg_operator")),
        _col("oprnegate", _optional_oid("pg_operator")),
        _col("oprcode", _optional_oid("pg_proc"), cast=_REGPROC),
        _col("oprrest", _optional_oid("pg_proc"), cast=_REGPROC),
        _col("oprjoin", _optional_oid("pg_proc"), cast=_REGPROC),
    ),
    _table(
        "pg_amop",
        _key("oid"),
        _col("amopfamily", _oid("pg_opfamily")),
        _col("amoplefttype", _oid("pg_type")),
        _col("amoprighttype", _oid("pg_type")),
        _col("amopopr", _oid("pg_operator")),
        _col("amopmethod", _oid("pg_am")),
        _col("amopsortfamily", _optional_oid("pg_opfamily"), min_version=90100),
    ),
    _table(
        "pg_amproc",
        _key("oid"),
        _col("amprocfamily", _oid("pg_opfamily")),
        _col("amproclefttype", _oid("pg_type")),
        _col("amprocrighttype", _oid("pg_type")),
        _col("amproc", _oid("pg_proc"), cast=_REGPROC),
    ),
    _table(
        "pg_default_acl",
        _key("oid", min_version=90000),
        _col("defaclnamespace", _optional_oid("pg_namespace"), min_version=90000),
        _col("defaclrole", _oid("pg_authid"), min_version=90000),
    ),
    _table(
        "pg_rewrite",
        _key("oid"),
        _col("rulename"),
        _col("ev_class", _oid("pg_class")),
    ),
    _table(
        "pg_inherits",
        _key("inhrelid", _oid("pg_class")),
        _key("inhparent", _oid("pg_class")),
    ),
    _table(
        "pg_largeobject_metadata",
        _key("oid", min_version=90000),
        _col("lomowner", _oid("pg_authid"), min_version=90000),
    ),
    _table(
        "pg_largeobject",
        _key("loid", _oid("pg_largeobject_metadata")),
        _key("pageno"),
    ),
    _table(
        "pg_aggregate",
        _key("aggfnoid", _oid("pg_proc"), cast=_REGPROC),
        _col("aggtransfn", _oid("pg_proc"), cast=_REGPROC),
        _col("aggfinalfn", _optional_oid("pg_proc"), cast=_REGPROC),
        _col("aggsortop", _optional_oid("pg_operator")),
        _col("aggtranstype", _oid("pg_type")),
    ),
    _table(
        "pg_ts_config_map",
        _key("mapcfg", _optional_oid("pg_ts_config")),
        _key("maptokentype"),
        _key("mapseqno"),
        _col("mapdict", _optional_oid("pg_ts_dict")),
    ),
    _table(
        "pg_range",
        _key("rngtypid", _oid("pg_type"), min_version=90200),
        _col("rngsubtype", _oid("pg_type"), min_version=90200),
        _col("rngcollation", _optional_oid("pg_collation"), min_version=90200),
        _col("rngsubopc", _oid("pg_opclass"), min_version=90200),
        _col("rngcanonical", _optional_oid("pg_proc"), cast=_REGPROC, min_version=90200),
        _col("rngsubdiff", _optional_oid("pg_proc"), cast=_REGPROC, min_version=90200),
    ),
    _table(
        "pg_attrdef",
        _key("oid"),
        _col("adrelid", _oid("pg_class")),
    ),
    _table(
        "pg_attribute",
        _key("attrelid", _oid("pg_class")),
        _col("attname", display=True),
        _key("attnum", ATTNUM),
        _col("atttypid", _optional_oid("pg_type")),
        _col("attcollation", _optional_oid("pg_collation"), min_version=90100),
    ),
    _table(
        "pg_statistic",
        _key("starelid", _oid("pg_class")),
        _key("staattnum"),
        _key("stainherit", min_version=90000),
        _col("staop1", _optional_oid("pg_operator")),
        _col("staop2", _optional_oid("pg_operator")),
        _col("staop3", _optional_oid("pg_operator")),
        _col("staop4", _optional_oid("pg_operator")),
    ),
    _table(
        "pg_db_role_setting",
        _key("setdatabase", _optional_oid("pg_database"), min_version=90000),
        _key("setrole", _optional_oid("pg_authid"), min_version=90000),
    ),
    _table(
        "pg_depend",
        _col("classid", DEPENDENCY_CLASS_ID, display=True),
        _col("objid", DEPENDENCY_ID, display=True),
        _col("objsubid", DEPENDENCY_SUBID, display=True),
        _col("refclassid", DEPENDENCY_CLASS_ID, display=True),
        _col("refobjid", DEPENDENCY_ID, display=True),
        _col("refobjsubid", DEPENDENCY_SUBID, display=True),
        _col("deptype", display=True),
    ),
    _table(
        "pg_shdepend",
        _col("dbid", _optional_oid("pg_database"), display=True),
        _col("classid", DEPENDENCY_CLASS_ID, display=True),
        _col("objid", DEPENDENCY_ID, display=True),
        _col("objsubid", DEPENDENCY_SUBID, display=True),
        _col("refclassid", DEPENDENCY_CLASS_ID, display=True),
        _col("refobjid", DEPENDENCY_ID, display=True),
        _col("deptype", display=True),
    ),
    _table(
        "edb_dir",
        _key("oid", edb_only=True),
        _col("dirowner", _oid("pg_authid"), edb_only=True),
    ),
    _table(
        "edb_partdef",
        _key("oid", min_version=90100, edb_only=True),
        _col("pdefrel", _oid("pg_class"), min_version=90100, edb_only=True),
    ),
    _table(
        "edb_partition",
        _key("oid", min_version=90100, edb_only=True),
        _col("partpdefid", _oid("edb_partdef"), min_version=90100, edb_only=True),
        _col("partrelid", _oid("pg_class"), min_version=90100, edb_only=True),
        _col("partparent", _optional_oid("edb_partition"), min_version=90100, edb_only=True),
        _col("partcons", _oid("pg_constraint"), min_version=90100, edb_only=True),
    ),
    # policyobject was meant to point at either pg_class or pg_synonym, but
    # synonym support was never implemented, so it is checked against pg_class.
    _table(
        "edb_policy",
        _key("oid", min_version=90100, edb_only=True),
        _col("policygroup", min_version=90100, edb_only=True),
        _col("policyobject", _oid("pg_class"), min_version=90100, edb_only=True),
        _col("policyproc", _oid("pg_proc"), min_version=90100, edb_only=True),
    ),
    _table(
        "pg_synonym",
        _key("oid", edb_only=True),
        _col("synnamespace", _optional_oid("pg_namespace"), edb_only=True),
        _col("synowner", _oid("pg_authid"), edb_only=True),
    ),
    _table(
        "edb_variable",
        _key("oid", edb_only=True),
        _col("varpackage", _oid("pg_namespace"), edb_only=True),
        _col("vartype", _optional_oid("pg_type"), edb_only=True),
    ),
    _table(
        "pg_description",
        _col("classoid", DEPENDENCY_CLASS_ID, display=True),
        _col("objoid", DEPENDENCY_ID, display=True),
        _col("objsubid", DEPENDENCY_SUBID, display=True),
    ),
    _table(
        "pg_shdescription",
        _col("classoid", DEPENDENCY_CLASS_ID, display=True),
        _col("objoid", DEPENDENCY_ID, display=True),
    ),
    _table(
        "pg_seclabel",
        _col("classoid", DEPENDENCY_CLASS_ID, display=True, min_version=90100),
        _col("objoid", DEPENDENCY_ID, display=True, min_version=90100),
        _col("objsubid", DEPENDENCY_SUBID, display=True, min_version=90100),
        _col("provider", display=True, min_version=90100),
    ),
    _table(
        "pg_shseclabel",
        _col("classoid", DEPENDENCY_CLASS_ID, display=True, min_version=90200),
        _col("objoid", DEPENDENCY_ID, display=True, min_version=90200),
        _col("provider", display=True, min_version=90200),
    ),
    _table(
        "pg_auth_members",
        _col("roleid", _oid("pg_authid"), display=True),
        _col("member", _oid("pg_authid"), display=True),
        _col("grantor", _oid("pg_authid")),
    ),
    _table(
        "pg_policy",
        _key("oid", min_version=90500),
        _col("polname", min_version=90500),
        _col("polrelid", _oid("pg_class"), min_version=90500),
        _col("polroles", _oid_array("pg_authid", zero_ok=True), min_version=90500),
    ),
    _table(
        "edb_profile",
        _key("oid", min_version=90500, edb_only=True),
        _col("prfname", display=True, min_version=90500, edb_only=True),
    ),
    _table(
        "edb_queue_table",
        _key("oid", min_version=90600, edb_only=True),
        _col("qtname", display=True, min_version=90600, edb_only=True),
        _col("qtnamespace", _oid("pg_namespace"), min_version=90600, edb_only=True),
        _col("qtrelid", _oid("pg_class"), min_version=90600, edb_only=True),
        _col("qpayloadtype", _oid("pg_type"), min_version=90600, edb_only=True),
    ),
    _table(
        "edb_queue",
        _key("oid", min_version=90600, edb_only=True),
        _col("aqname", display=True, min_version=90600, edb_only=True),
        _col("aqrelid", _oid("pg_class"), min_version=90600, edb_only=True),
    ),
    _table(
        "edb_password_history",
        _key("passhistroleid", _oid("pg_authid"), min_version=90500, edb_only=True),
        _key("passhistpassword", min_version=90500, edb_only=True),
        _col("passhistpasswordsetat", display=True, min_version=90500, edb_only=True),
    ),
    _table(
        "edb_queue_callback",
        _key("oid", min_version=90600, edb_only=True),
        _col("qcbqueueid", _oid("edb_queue"), display=True, min_version=90600, edb_only=True),
        _col("qcbowner", _oid("pg_authid"), min_version=90600, edb_only=True),
    ),
    _table(
        "edb_resource_group",
        _key("oid", min_version=90400, edb_only=True),
        _col("rgrpname", display=True, min_version=90400, edb_only=True),
    ),
    _table(
        "pg_init_privs",
        _key("objoid", min_version=90600),
        _key("classoid", _oid("pg_class"), min_version=90600),
        _key("objsubid", min_version=90600),
    ),
    _table(
        "pg_partitioned_table",
        _key("partrelid", _oid("pg_class"), min_version=100000),
        _col("partclass", _oid_vector("pg_opclass"), min_version=100000),
        _col("partcollation", _oid_vector("pg_collation", zero_ok=True), min_version=100000),
    ),
    _table(
        "pg_pltemplate",
        _key("tmplname", max_version=130000),
    ),
    _table(
        "pg_publication",
        _key("oid", min_version=100000),
        _col("pubowner", _oid("pg_authid"), min_version=100000),
    ),
    _table(
        "pg_publication_rel",
        _key("oid", min_version=100000),
        _col("prpubid", _oid("pg_publication"), min_version=100000),
        _col("prrelid", _oid("pg_class"), min_version=100000),
    ),
    _table(
        "pg_replication_origin",
        _key("roident", min_version=90500),
    ),
    _table(
        "pg_sequence",
        _key("seqrelid", _oid("pg_class"), min_version=100000),
        _col("seqtypid", _oid("pg_type"), min_version=100000),
    ),
    _table(
        "pg_statistic_ext",
        _key("oid", min_version=100000),
        _col("stxrelid", _oid("pg_class"), min_version=100000),
        _col("stxnamespace", _oid("pg_namespace"), min_version=100000),
        _col("stxowner", _oid("pg_authid"), min_version=100000),
    ),
    _table(
        "pg_subscription",
        _key("oid", min_version=100000),
        _col("subdbid", _oid("pg_database"), min_version=100000),
        _col("subowner", _oid("pg_authid"), min_version=100000),
    ),
    _table(
        "pg_subscription_rel",
        _key("srsubid", _oid("pg_subscription"), min_version=100000),
        _key("srrelid", _oid("pg_class"), min_version=100000),
    ),
    _table(
        "pg_transform",
        _key("oid", min_version=90500),
        _col("trftype", _oid("pg_type"), min_version=90500),
        _col("trflang", _oid("pg_language"), min_version=90500),
        _col("trffromsql", _oid("pg_proc"), cast=_REGPROC, min_version=90500),
        _col("trftosql", _oid("pg_proc"), cast=_REGPROC, min_version=90500),
    ),
)
