"""Business-registry lookups by CNPJ (BrasilAPI, ReceitaWS as backup)."""
import time
from typing import Callable, Dict, List, Optional, Sequence

import requests
from loguru import logger

from configurations.config import Config
from models.entities import CompanyRecord
from services.cnpj import normalize_cnpj

ProgressCallback = Callable[[int, int, Optional[CompanyRecord]], None]


class BusinessRegistryService:
    def __init__(self, session: Optional[requests.Session] = None,
                 brasilapi_url: str = Config.BRASILAPI_URL,
                 receitaws_url: str = Config.RECEITAWS_URL,
                 timeout: int = Config.HTTP_TIMEOUT_SECONDS,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session or requests.Session()
        self.brasilapi_url = brasilapi_url.rstrip('/')
        self.receitaws_url = receitaws_url.rstrip('/')
        self.timeout = timeout
        self._sleep = sleep

        logger.info(f"BusinessRegistryService initialized with {self.brasilapi_url} and {self.receitaws_url}")

    def lookup(self, cnpj: str) -> Optional[CompanyRecord]:
        """Fetch a company record, trying BrasilAPI first and ReceitaWS second."""
        digits = normalize_cnpj(cnpj)

        record = self._lookup_brasilapi(digits)
        if record is None:
            logger.info(f"BrasilAPI failed for {digits}, trying ReceitaWS...")
            record = self._lookup_receitaws(digits)
        return record

    def lookup_many(self, cnpjs: Sequence[str], on_progress: Optional[ProgressCallback] = None,
                    delay_s: float = Config.REGISTRY_BATCH_DELAY_SECONDS) -> List[CompanyRecord]:
        """Look CNPJs up one at a time, pausing between requests to avoid being blocked."""
        records: List[CompanyRecord] = []
        total = len(cnpjs)
        for index, cnpj in enumerate(cnpjs):
            record = self.lookup(cnpj)
            if record is not None:
                records.append(record)
            if on_progress:
                on_progress(index + 1, total, record)
            if index < total - 1:
                self._sleep(delay_s)
        return records

    def _get_json(self, url: str) -> Dict:
        response = self.session.get(url, headers={'accept': 'application/json'}, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _lookup_brasilapi(self, cnpj: str) -> Optional[CompanyRecord]:
        try:
            data = self._get_json(f"{self.brasilapi_url}/{cnpj}")
            return self._from_brasilapi(data)
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"BrasilAPI lookup failed for {cnpj}: {e}")
            return None

    def _lookup_receitaws(self, cnpj: str) -> Optional[CompanyRecord]:
        try:
            data = self._get_json(f"{self.receitaws_url}/{cnpj}")
            if data.get('status') == 'ERROR':
                raise ValueError(data.get('message', 'ReceitaWS returned ERROR'))
            return self._from_receitaws(data)
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"ReceitaWS lookup failed for {cnpj}: {e}")
            return None

    @staticmethod
    def _from_brasilapi(data: Dict) -> CompanyRecord:
        activities = data.get('atividade_principal') or [{}]
        phone = data.get('ddd_telefone_1')
        return CompanyRecord(
            cnpj=normalize_cnpj(str(data['cnpj'])),
            legal_name=data.get('razao_social') or data.get('nome') or '',
            trade_name=data.get('nome_fantasia') or None,
            primary_activity=data.get('cnae_fiscal_descricao') or activities[0].get('text') or 'Não informado',
            street=data.get('logradouro') or '',
            number=data.get('numero') or '',
            complement=data.get('complemento') or None,
            district=data.get('bairro') or '',
            municipality=data.get('municipio') or '',
            uf=data.get('uf') or '',
            cep=data.get('cep') or '',
            registration_status=data.get('descricao_situacao_cadastral') or data.get('situacao'),
            phone=f"({phone[:2]}) {phone[2:]}" if phone else None,
            email=data.get('correio_eletronico') or None,
        )

    @staticmethod
    def _from_receitaws(data: Dict) -> CompanyRecord:
        activities = data.get('atividade_principal') or [{}]
        return CompanyRecord(
            cnpj=normalize_cnpj(str(data['cnpj'])),
            legal_name=data.get('nome') or '',
            trade_name=data.get('fantasia') or None,
            primary_activity=activities[0].get('text') or 'Não informado',
            street=data.get('logradouro') or '',
            number=data.get('numero') or '',
            complement=data.get('complemento') or None,
            district=data.get('bairro') or '',
            municipality=data.get('municipio') or '',
            uf=data.get('uf') or '',
            cep=data.get('cep') or '',
            registration_status=data.get('situacao'),
            phone=data.get('telefone') or None,
            email=data.get('email') or None,
        )
