from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing_extensions import override

from payment_intake.core.entities.email import EmailRecord
from payment_intake.core.repositories.email import EmailRepository
from payment_intake.db.models.email import DBEmail


class SQLAlchemyEmailRepository(EmailRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, db_model: DBEmail) -> EmailRecord:
        return EmailRecord.model_validate(db_model)

    def _to_db_model(self, entity: EmailRecord) -> DBEmail:
        return DBEmail(
            **entity.model_dump(exclude={'email_id'}, exclude_none=True)
        )

    @override
    async def create(self, email: EmailRecord) -> EmailRecord:
        db_email = self._to_db_model(email)
        self.session.add(db_email)
        await self.session.flush()
        await self.session.refresh(db_email)
        return self._to_entity(db_email)

    @override
    async def get_by_id(self, email_id: int) -> Optional[EmailRecord]:
        db_email = await self.session.get(DBEmail, email_id)
        if db_email:
            return self._to_entity(db_email)
        return None

    @override
    async def get_all(self) -> List[EmailRecord]:
        result = await self.session.execute(
            select(DBEmail).order_by(DBEmail.email_id)
        )
        return [self._to_entity(row) for row in result.scalars().all()]
