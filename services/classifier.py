"""Company classification: catalog lookup first, name keywords second."""
from typing import Dict, List, Optional, Sequence, Tuple

from configurations.config import Config
from models.entities import CompanyType
from services.cnpj import normalize_cnpj


class CompanyClassifier:
    def __init__(self, catalogs: Optional[Dict[str, List[str]]] = None,
                 keyword_rules: Sequence[Tuple[str, List[str]]] = Config.COMPANY_KEYWORD_RULES,
                 default: str = Config.DEFAULT_COMPANY):
        self.keyword_rules = [(CompanyType(company), [k.upper() for k in keywords])
                              for company, keywords in keyword_rules]
        self.default = CompanyType(default)
        self._by_cnpj: Dict[str, CompanyType] = {}
        self.load_catalogs(catalogs or {})

    def load_catalogs(self, catalogs: Dict[str, List[str]]) -> None:
        """Build the CNPJ -> company map; earlier catalogs win on duplicates."""
        ordered = [name for name in Config.COMPANY_CATALOG_ORDER if name in catalogs]
        ordered += [name for name in catalogs if name not in ordered]
        by_cnpj: Dict[str, CompanyType] = {}
        for name in ordered:
            for cnpj in catalogs[name]:
                by_cnpj.setdefault(normalize_cnpj(cnpj), CompanyType(name))
        self._by_cnpj = by_cnpj

    def classify(self, legal_name: str, cnpj: str) -> CompanyType:
        catalog_hit = self._by_cnpj.get(normalize_cnpj(cnpj))
        if catalog_hit is not None:
            return catalog_hit

        name = legal_name.upper()
        for company, keywords in self.keyword_rules:
            if any(keyword in name for keyword in keywords):
                return company
        return self.default
