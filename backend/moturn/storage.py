from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import aliased
from sqlmodel import Session, select, col

from moturn.db import get_session, utcnow
from moturn.models.user_db import User
from moturn.models.session_db import AuthSession
from moturn.models.category_db import Category
from moturn.models.item_db import Item, Like
from moturn.models.chat_db import Chat, Message
from moturn.models.user import UserRead, UserUpsert
from moturn.models.category import CategoryCreate, CategoryRead
from moturn.models.item import ItemCounts, ItemCreate, ItemRead, ItemWithDetails, LikeToggle
from moturn.models.chat import ChatRead, ChatWithDetails, MessageCreate, MessageRead

Seller = aliased(User, name="seller")
Buyer = aliased(User, name="buyer")


def _user(user: Optional[User]) -> Optional[UserRead]:
    return UserRead.model_validate(user) if user else None


def _count_by_item(session: Session, model, item_ids: List[int]) -> Dict[int, int]:
    if not item_ids:
        return {}
    statement = (
        select(model.item_id, func.count(model.id))
        .where(col(model.item_id).in_(item_ids))
        .group_by(model.item_id)
    )
    return {item_id: total for item_id, total in session.exec(statement).all()}


def _item_details(item: Item, seller: Optional[User], category: Optional[Category],
                  likes: int = 0, chats: int = 0, is_liked: bool = False) -> ItemWithDetails:
    return ItemWithDetails(
        **ItemRead.model_validate(item).model_dump(),
        seller=_user(seller),
        category=CategoryRead.model_validate(category) if category else None,
        counts=ItemCounts(likes=likes, chats=chats),
        is_liked=is_liked,
    )


def _item_select():
    return (
        select(Item, User, Category)
        .join(User, Item.seller_id == User.id, isouter=True)
        .join(Category, Item.category_id == Category.id, isouter=True)
    )


class DatabaseStorage:
    """One method per use case. Every method opens its own session and hands back API models."""

    # Users

    def get_user(self, user_id: str) -> Optional[UserRead]:
        with get_session() as session:
            return _user(session.get(User, user_id))

    def upsert_user(self, data: UserUpsert) -> UserRead:
        values = data.model_dump(exclude_unset=True)
        with get_session() as session:
            user = session.get(User, data.id)
            if user is None:
                user = User(**{k: v for k, v in values.items() if v is not None})
            else:
                for key, value in values.items():
                    setattr(user, key, value)
                user.updated_at = utcnow()
            session.add(user)
            session.commit()
            session.refresh(user)
            return UserRead.model_validate(user)

    # Identity provider sessions

    def get_auth_session(self, sid: str) -> Optional[AuthSession]:
        with get_session() as session:
            auth_session = session.get(AuthSession, sid)
            if auth_session is None:
                return None
            return AuthSession(sid=auth_session.sid, sess=dict(auth_session.sess), expire=auth_session.expire)

    def save_auth_session(self, sid: str, sess: Dict[str, Any], expire: datetime) -> None:
        with get_session() as session:
            auth_session = session.get(AuthSession, sid)
            if auth_session is None:
                auth_session = AuthSession(sid=sid, sess=sess, expire=expire)
            else:
                auth_session.sess = sess
                auth_session.expire = expire
            session.add(auth_session)
            session.commit()

    def delete_auth_session(self, sid: str) -> None:
        with get_session() as session:
            auth_session = session.get(AuthSession, sid)
            if auth_session is not None:
                session.delete(auth_session)
                session.commit()

    # Categories

    def get_categories(self) -> List[CategoryRead]:
        with get_session() as session:
            categories = session.exec(select(Category).order_by(Category.name)).all()
            return [CategoryRead.model_validate(c) for c in categories]

    def get_category(self, category_id: int) -> Optional[CategoryRead]:
        with get_session() as session:
            category = session.get(Category, category_id)
            return CategoryRead.model_validate(category) if category else None

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRead]:
        with get_session() as session:
            category = session.exec(select(Category).where(Category.slug == slug)).first()
            return CategoryRead.model_validate(category) if category else None

    def create_category(self, data: CategoryCreate) -> CategoryRead:
        with get_session() as session:
            category = Category(name=data.name, slug=data.slug)
            session.add(category)
            session.commit()
            session.refresh(category)
            return CategoryRead.model_validate(category)

    # Items

    def get_items(self, category_id: Optional[int] = None, region_code: Optional[str] = None,
                  search: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[ItemWithDetails]:
        statement = _item_select().where(Item.status == "active")
        if category_id is not None:
            statement = statement.where(Item.category_id == category_id)
        if region_code:
            statement = statement.where(Item.region_code == region_code)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(or_(col(Item.title).ilike(pattern), col(Item.description).ilike(pattern)))
        statement = (
            statement.order_by(col(Item.created_at).desc(), col(Item.id).desc())
            .offset(offset)
            .limit(limit)
        )

        with get_session() as session:
            rows = session.exec(statement).all()
            item_ids = [item.id for item, _, _ in rows]
            likes = _count_by_item(session, Like, item_ids)
            chats = _count_by_item(session, Chat, item_ids)
            return [
                _item_details(item, seller, category, likes.get(item.id, 0), chats.get(item.id, 0))
                for item, seller, category in rows
            ]

    def get_item_by_id(self, item_id: int, user_id: Optional[str] = None) -> Optional[ItemWithDetails]:
        with get_session() as session:
            row = session.exec(_item_select().where(Item.id == item_id)).first()
            if row is None:
                return None
            item, seller, category = row
            likes = _count_by_item(session, Like, [item.id]).get(item.id, 0)
            chats = _count_by_item(session, Chat, [item.id]).get(item.id, 0)
            is_liked = False
            if user_id:
                is_liked = session.exec(
                    select(Like).where(Like.item_id == item_id, Like.user_id == user_id)
                ).first() is not None
            return _item_details(item, seller, category, likes, chats, is_liked)

    def get_items_by_seller(self, seller_id: str) -> List[ItemWithDetails]:
        statement = (
            _item_select()
            .where(Item.seller_id == seller_id)
            .order_by(col(Item.created_at).desc(), col(Item.id).desc())
        )
        with get_session() as session:
            rows = session.exec(statement).all()
            item_ids = [item.id for item, _, _ in rows]
            likes = _count_by_item(session, Like, item_ids)
            chats = _count_by_item(session, Chat, item_ids)
            return [
                _item_details(item, seller, category, likes.get(item.id, 0), chats.get(item.id, 0))
                for item, seller, category in rows
            ]

    def create_item(self, seller_id: str, data: ItemCreate, images: List[str]) -> ItemRead:
        with get_session() as session:
            item = Item(seller_id=seller_id, images=list(images), **data.model_dump())
            session.add(item)
            session.commit()
            session.refresh(item)
            return ItemRead.model_validate(item)

    def update_item_views(self, item_id: int) -> None:
        with get_session() as session:
            item = session.get(Item, item_id)
            if item is None:
                return
            item.views = (item.views or 0) + 1
            session.add(item)
            session.commit()

    def update_item_status(self, item_id: int, status: str) -> Optional[ItemRead]:
        with get_session() as session:
            item = session.get(Item, item_id)
            if item is None:
                return None
            item.status = status
            item.updated_at = utcnow()
            session.add(item)
            session.commit()
            session.refresh(item)
            return ItemRead.model_validate(item)

    # Likes

    def get_likes_by_user(self, user_id: str) -> List[ItemWithDetails]:
        statement = (
            select(Item, User, Category)
            .select_from(Like)
            .join(Item, Like.item_id == Item.id)
            .join(User, Item.seller_id == User.id, isouter=True)
            .join(Category, Item.category_id == Category.id, isouter=True)
            .where(Like.user_id == user_id)
            .order_by(col(Like.created_at).desc(), col(Like.id).desc())
        )
        with get_session() as session:
            rows = session.exec(statement).all()
            item_ids = [item.id for item, _, _ in rows]
            likes = _count_by_item(session, Like, item_ids)
            chats = _count_by_item(session, Chat, item_ids)
            return [
                _item_details(item, seller, category, likes.get(item.id, 0), chats.get(item.id, 0), is_liked=True)
                for item, seller, category in rows
            ]

    def toggle_like(self, user_id: str, item_id: int) -> LikeToggle:
        with get_session() as session:
            existing = session.exec(
                select(Like).where(Like.user_id == user_id, Like.item_id == item_id)
            ).all()
            if existing:
                for like in existing:
                    session.delete(like)
                session.commit()
                return LikeToggle(is_liked=False)

            session.add(Like(user_id=user_id, item_id=item_id))
            session.commit()
            return LikeToggle(is_liked=True)

    # Chats

    def get_chats_by_user(self, user_id: str) -> List[ChatWithDetails]:
        statement = (
            select(Chat, Item, Seller, Buyer)
            .join(Item, Chat.item_id == Item.id, isouter=True)
            .join(Seller, Chat.seller_id == Seller.id, isouter=True)
            .join(Buyer, Chat.buyer_id == Buyer.id, isouter=True)
            .where(or_(Chat.seller_id == user_id, Chat.buyer_id == user_id))
            .order_by(col(Chat.updated_at).desc(), col(Chat.id).desc())
        )
        with get_session() as session:
            rows = session.exec(statement).all()
            chat_ids = [chat.id for chat, _, _, _ in rows]

            last_messages: Dict[int, MessageRead] = {}
            if chat_ids:
                newest_first = session.exec(
                    select(Message)
                    .where(col(Message.chat_id).in_(chat_ids))
                    .order_by(col(Message.created_at).desc(), col(Message.id).desc())
                ).all()
                for message in newest_first:
                    if message.chat_id not in last_messages:
                        last_messages[message.chat_id] = MessageRead.model_validate(message)

            return [
                ChatWithDetails(
                    **ChatRead.model_validate(chat).model_dump(),
                    item=ItemRead.model_validate(item) if item else None,
                    seller=_user(seller),
                    buyer=_user(buyer),
                    last_message=last_messages.get(chat.id),
                )
                for chat, item, seller, buyer in rows
            ]

    def get_or_create_chat(self, item_id: int, seller_id: str, buyer_id: str) -> Tuple[ChatRead, bool]:
        """Returns the chat for the (item, seller, buyer) triple and whether it was just created."""
        with get_session() as session:
            existing = session.exec(
                select(Chat)
                .where(Chat.item_id == item_id, Chat.seller_id == seller_id, Chat.buyer_id == buyer_id)
                .order_by(Chat.id)
            ).first()
            if existing is not None:
                return ChatRead.model_validate(existing), False

            chat = Chat(item_id=item_id, seller_id=seller_id, buyer_id=buyer_id)
            session.add(chat)
            session.commit()
            session.refresh(chat)
            return ChatRead.model_validate(chat), True

    def get_chat(self, chat_id: int) -> Optional[ChatRead]:
        with get_session() as session:
            chat = session.get(Chat, chat_id)
            return ChatRead.model_validate(chat) if chat else None

    def get_chat_with_messages(self, chat_id: int) -> Optional[ChatWithDetails]:
        statement = (
            select(Chat, Item, Seller, Buyer)
            .join(Item, Chat.item_id == Item.id, isouter=True)
            .join(Seller, Chat.seller_id == Seller.id, isouter=True)
            .join(Buyer, Chat.buyer_id == Buyer.id, isouter=True)
            .where(Chat.id == chat_id)
        )
        with get_session() as session:
            row = session.exec(statement).first()
            if row is None:
                return None
            chat, item, seller, buyer = row
            messages = self._messages(session, chat_id)
            return ChatWithDetails(
                **ChatRead.model_validate(chat).model_dump(),
                item=ItemRead.model_validate(item) if item else None,
                seller=_user(seller),
                buyer=_user(buyer),
                messages=messages,
                last_message=messages[-1] if messages else None,
            )

    def create_message(self, chat_id: int, sender_id: str, data: MessageCreate) -> MessageRead:
        with get_session() as session:
            message = Message(chat_id=chat_id, sender_id=sender_id, **data.model_dump())
            session.add(message)
            session.commit()
            session.refresh(message)

            chat = session.get(Chat, chat_id)
            if chat is not None:
                chat.updated_at = utcnow()
                session.add(chat)
                session.commit()

            return MessageRead.model_validate(message)

    def get_messages_by_chat_id(self, chat_id: int) -> List[MessageRead]:
        with get_session() as session:
            return self._messages(session, chat_id)

    @staticmethod
    def _messages(session: Session, chat_id: int) -> List[MessageRead]:
        messages = session.exec(
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(col(Message.created_at), col(Message.id))
        ).all()
        return [MessageRead.model_validate(m) for m in messages]


storage = DatabaseStorage()
