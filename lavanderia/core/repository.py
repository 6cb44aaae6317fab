# lavanderia/core/repository.py

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from bson import ObjectId
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from lavanderia.core.exceptions import StoreError

ModelType = TypeVar("ModelType", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository(Generic[ModelType]):
    """Repositório base para uma coleção MongoDB com Motor e Pydantic."""

    model: Type[ModelType]
    collection_name: str

    def __init__(self, db: AsyncIOMotorDatabase):
        if not getattr(self, "collection_name", None):
            raise AttributeError("Repository subclass must define a 'collection_name'")
        if not getattr(self, "model", None) or not issubclass(self.model, BaseModel):
            raise AttributeError("Repository subclass must define a Pydantic 'model'")

        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]

    @staticmethod
    def _to_objectid(id_str: Any) -> Optional[ObjectId]:
        """Converte input para ObjectId de forma segura, retornando None se inválido."""
        if isinstance(id_str, ObjectId):
            return id_str
        if isinstance(id_str, str) and ObjectId.is_valid(id_str):
            return ObjectId(id_str)
        return None

    def _handle_db_exception(self, e: Exception, operation: str, query: Optional[Dict] = None):
        """Loga e levanta StoreError padronizado."""
        context = f"op='{operation}' coll='{self.collection_name}'"
        if query:
            context += f" query='{str(query)[:100]}'"
        logger.exception(f"DB Error during {context}: {e}")
        raise StoreError(str(e) or f"Database error during operation: {operation}") from e

    def _prepare_data_for_db(self, data: Dict) -> Dict:
        """Prepara dados para inserção/atualização (Decimal e datas de calendário)."""
        prepared_data = {}
        for key, value in data.items():
            if isinstance(value, Decimal):
                prepared_data[key] = str(value)
            elif isinstance(value, date) and not isinstance(value, datetime):
                prepared_data[key] = value.isoformat()
            else:
                prepared_data[key] = value
        return prepared_data

    def _validate(self, document: Optional[Dict]) -> Optional[ModelType]:
        return self.model.model_validate(document) if document else None

    async def get_by_id(self, id: str | ObjectId) -> Optional[ModelType]:
        """Busca um documento pelo seu _id."""
        obj_id = self._to_objectid(id)
        if not obj_id:
            return None
        return await self.get_by({"_id": obj_id})

    async def get_by(self, query: Dict[str, Any], sort: Optional[List[Tuple[str, int]]] = None) -> Optional[ModelType]:
        """Busca o PRIMEIRO documento que corresponde a um critério."""
        try:
            document = await self.collection.find_one(query, sort=sort)
        except Exception as e:
            self._handle_db_exception(e, "get_by", query=query)
        return self._validate(document)

    async def list_by(
        self,
        query: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 0,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[ModelType]:
        """Lista documentos com base em critérios, paginação e ordenação (limit=0: sem limite)."""
        query = query or {}
        try:
            cursor = self.collection.find(query, sort=sort, skip=max(0, skip), limit=max(0, limit))
            documents = await cursor.to_list(length=None)
        except Exception as e:
            self._handle_db_exception(e, "list_by", query=query)
        return [self.model.model_validate(doc) for doc in documents]

    async def create(self, data_in: BaseModel | Dict) -> ModelType:
        """Cria um novo documento."""
        if isinstance(data_in, BaseModel):
            create_data = data_in.model_dump()
        else:
            create_data = dict(data_in)

        create_data = self._prepare_data_for_db(create_data)
        now = utcnow()
        create_data.setdefault("created_at", now)
        create_data.setdefault("updated_at", now)
        create_data.pop("_id", None)
        create_data.pop("id", None)

        try:
            result: InsertOneResult = await self.collection.insert_one(create_data)
        except Exception as e:
            self._handle_db_exception(e, "create")

        created = await self.get_by_id(result.inserted_id)
        if created is None:
            logger.critical(f"Failed to retrieve document after insertion! ID: {result.inserted_id}, Collection: {self.collection_name}")
            raise StoreError("Failed to retrieve document after creation.")
        return created

    async def update_by(self, query: Dict[str, Any], data_in: BaseModel | Dict) -> Optional[ModelType]:
        """Atualiza o primeiro documento que corresponde ao critério usando $set."""
        if isinstance(data_in, BaseModel):
            update_data = data_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(data_in)

        update_data = self._prepare_data_for_db(update_data)
        for field in ("_id", "id", "created_at", "org_id"):
            update_data.pop(field, None)

        if not update_data:
            logger.debug(f"Update called with no updatable data in {self.collection_name}.")
            return await self.get_by(query)

        update_data["updated_at"] = utcnow()
        try:
            result: UpdateResult = await self.collection.update_one(query, {"$set": update_data})
        except Exception as e:
            self._handle_db_exception(e, "update", query=query)

        if result.matched_count == 0:
            logger.warning(f"Document not found for update in {self.collection_name}: {query}")
            return None
        return await self.get_by(query)

    async def delete_by(self, query: Dict[str, Any]) -> int:
        """Deleta todos os documentos que correspondem ao critério."""
        try:
            result: DeleteResult = await self.collection.delete_many(query)
        except Exception as e:
            self._handle_db_exception(e, "delete", query=query)
        if result.deleted_count:
            logger.info(f"{result.deleted_count} document(s) deleted from {self.collection_name}.")
        return result.deleted_count

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """Conta documentos que correspondem a um critério."""
        query = query or {}
        try:
            return await self.collection.count_documents(query)
        except Exception as e:
            self._handle_db_exception(e, "count", query=query)


class OrgScopedRepository(BaseRepository[ModelType]):
    """Repositório de tenant: toda leitura e escrita é filtrada pelo org_id."""

    @staticmethod
    def scoped(org_id: str, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {**(query or {}), "org_id": org_id}

    def _id_query(self, org_id: str, id: str | ObjectId) -> Optional[Dict[str, Any]]:
        obj_id = self._to_objectid(id)
        if not obj_id:
            return None
        return self.scoped(org_id, {"_id": obj_id})

    async def get_for_org(self, org_id: str, id: str | ObjectId) -> Optional[ModelType]:
        query = self._id_query(org_id, id)
        return await self.get_by(query) if query else None

    async def list_for_org(
        self,
        org_id: str,
        query: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 0,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[ModelType]:
        return await self.list_by(self.scoped(org_id, query), skip=skip, limit=limit, sort=sort)

    async def create_for_org(self, org_id: str, data_in: BaseModel | Dict) -> ModelType:
        data = data_in.model_dump() if isinstance(data_in, BaseModel) else dict(data_in)
        data["org_id"] = org_id
        return await self.create(data)

    async def update_for_org(self, org_id: str, id: str | ObjectId, data_in: BaseModel | Dict) -> Optional[ModelType]:
        query = self._id_query(org_id, id)
        return await self.update_by(query, data_in) if query else None

    async def delete_for_org(self, org_id: str, id: str | ObjectId) -> bool:
        query = self._id_query(org_id, id)
        return bool(query) and await self.delete_by(query) > 0

    async def exists_for_org(self, org_id: str, id: str | ObjectId) -> bool:
        query = self._id_query(org_id, id)
        return bool(query) and await self.count(query) > 0
