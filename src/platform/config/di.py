"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import Database
from src.service.admission.driven_adapter.mail.smtp_ticket_mailer import SmtpTicketMailer
from src.service.admission.driven_adapter.qr.qrcode_generator import QrCodeGenerator
from src.service.admission.driven_adapter.repo.scanner_key_query_repo_impl import (
    ScannerKeyQueryRepoImpl,
)
from src.service.admission.driven_adapter.repo.ticket_command_repo_impl import (
    TicketCommandRepoImpl,
)
from src.service.admission.driven_adapter.repo.ticket_query_repo_impl import TicketQueryRepoImpl
from src.service.admission.driven_adapter.repo.ticket_type_query_repo_impl import (
    TicketTypeQueryRepoImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration, built once at process start
    config_service = providers.Object(settings)

    # Pooled store client; repositories open one session per operation
    database = providers.Singleton(Database, settings=config_service)

    # Repositories (stateless - use session_factory per call)
    scanner_key_query_repo = providers.Singleton(
        ScannerKeyQueryRepoImpl, session_factory=database.provided.session
    )
    ticket_command_repo = providers.Singleton(
        TicketCommandRepoImpl, session_factory=database.provided.session
    )
    ticket_query_repo = providers.Singleton(
        TicketQueryRepoImpl, session_factory=database.provided.session
    )
    ticket_type_query_repo = providers.Singleton(
        TicketTypeQueryRepoImpl, session_factory=database.provided.session
    )

    # Side-effect collaborators of issuance
    ticket_mailer = providers.Singleton(SmtpTicketMailer, settings=config_service)
    qr_code_generator = providers.Singleton(QrCodeGenerator)


container = Container()


def setup() -> None:
    container.config_service()
    container.database()


async def cleanup() -> None:
    await container.database().dispose()
    container.reset_singletons()
