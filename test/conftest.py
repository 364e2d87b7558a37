import pytest

from pos_exchange.application.processors.xml.xml_document_importer import NaxmlDocumentImporter
from pos_exchange.application.processors.xml.xml_document_validator import NaxmlDocumentValidator
from pos_exchange.application.services.file_processor import FileProcessor
from pos_exchange.domain.value_objects.store_context import StoreContext
from pos_exchange.infrastructure.repositories.in_memory_stores import InMemoryAuditStore, InMemoryFileLogStore


@pytest.fixture
def store_context():
    return StoreContext(store_id="store-1", pos_integration_id="pos-1", company_id="company-1", user_id="user-1")


@pytest.fixture
def file_log():
    return InMemoryFileLogStore()


@pytest.fixture
def audit_store():
    return InMemoryAuditStore()


@pytest.fixture
def processor(file_log, audit_store):
    return FileProcessor(
        validator=NaxmlDocumentValidator(),
        importer=NaxmlDocumentImporter(),
        file_log=file_log,
        audit_store=audit_store,
    )
