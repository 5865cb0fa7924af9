"""Sample data for local development: python -m moturn.seed"""
import logging
import sys

from sqlmodel import select, col

from moturn.db import create_db_and_tables, get_session
from moturn.models.category_db import Category
from moturn.models.item_db import Item
from moturn.models.user_db import User

logger = logging.getLogger(__name__)

CATEGORIES = [
    ("디지털기기", "digital"),
    ("가구/인테리어", "furniture"),
    ("의류", "clothing"),
    ("도서", "books"),
    ("스포츠/레저", "sports"),
    ("뷰티/미용", "beauty"),
    ("생활/가전", "home"),
    ("기타", "etc"),
]

USERS = [
    {"id": "user1", "email": "user1@example.com", "nickname": "김성수", "location": "성수동", "phone_verified": True},
    {"id": "user2", "email": "user2@example.com", "nickname": "박뚝섬", "location": "뚝섬동", "phone_verified": True},
    {"id": "user3", "email": "user3@example.com", "nickname": "이서울숲", "location": "서울숲", "phone_verified": False},
]

UNSPLASH = "https://images.unsplash.com/"

# seller, category slug, title, description, price, region, photo
ITEMS = [
    ("user1", "digital", "Apple 맥북 프로 M2 13인치 512GB",
     "맥북 프로 M2 13인치 512GB 모델입니다. 사용기간 6개월 정도이고 상태 매우 좋습니다.", 1200000, "성수동",
     "photo-1517336714731-489689fd1ca4"),
    ("user2", "digital", "아이폰 14 프로 256GB 딥퍼플",
     "아이폰 14 프로 256GB 딥퍼플 색상입니다. 케이스 끼고 사용해서 스크래치 없어요.", 950000, "뚝섬동",
     "photo-1592750475338-74b7b21085ab"),
    ("user1", "furniture", "허만밀러 의자 새제품",
     "허만밀러 에어론 의자 새제품입니다. 포장도 안뜯었어요.", 450000, "성수동",
     "photo-1541558869434-2840d308329a"),
    ("user3", "books", "IT 도서 모음 판매",
     "개발 관련 도서들 모음으로 판매합니다. 총 15권 정도.", 50000, "서울숲",
     "photo-1481627834876-b7833e8f5570"),
    ("user2", "clothing", "나이키 에어맥스 280",
     "나이키 에어맥스 280 사이즈입니다. 몇 번 안신어서 거의 새거예요.", 120000, "뚝섬동",
     "photo-1549298916-b41d501d3772"),
    ("user1", "digital", "캐논 EOS R5 풀세트",
     "캐논 EOS R5 바디와 24-70mm 렌즈 풀세트입니다.", 2800000, "성수동",
     "photo-1606983340126-99ab4feaa64a"),
    ("user3", "digital", "삼성 갤럭시 S23 울트라",
     "삼성 갤럭시 S23 울트라 512GB 모델입니다.", 890000, "서울숲",
     "photo-1610945265064-0e34e5519bbf"),
    ("user2", "home", "다이슨 청소기 V15",
     "다이슨 무선청소기 V15 모델입니다. 1년 사용했습니다.", 350000, "뚝섬동",
     "photo-1558618666-fcd25c85cd64"),
    ("user1", "digital", "로지텍 MX 마스터 3S",
     "로지텍 MX 마스터 3S 무선 마우스입니다.", 89000, "성수동",
     "photo-1527864550417-7fd91fc51a46"),
    ("user3", "furniture", "이케아 책상 BEKANT",
     "이케아 BEKANT 책상 화이트색상입니다. 조립완료 상태.", 65000, "서울숲",
     "photo-1586023492125-27b2c045efd7"),
    ("user2", "clothing", "아디다스 운동화 새제품",
     "아디다스 운동화 새제품입니다. 선물받았는데 사이즈가 안맞아요.", 95000, "뚝섬동",
     "photo-1542291026-7eec264c27ff"),
    ("user1", "clothing", "프라다 가방 정품",
     "프라다 사피아노 토트백 정품입니다. 구매증빙 있어요.", 1500000, "성수동",
     "photo-1584917865442-de89df76afd3"),
    ("user3", "sports", "요가매트 + 요가블록 세트",
     "요가매트와 요가블록 세트로 판매합니다. 몇번 안썼어요.", 35000, "서울숲",
     "photo-1544367567-0f2fcb009e0b"),
    ("user2", "digital", "LG 모니터 27인치 4K",
     "LG 27인치 4K 모니터입니다. USB-C 지원해요.", 420000, "뚝섬동",
     "photo-1527443224154-c4a3942d3acf"),
    ("user1", "digital", "소니 노이즈캔슬링 헤드폰",
     "소니 WH-1000XM5 노이즈캔슬링 헤드폰입니다.", 280000, "성수동",
     "photo-1484704849700-f032a568e944"),
    ("user3", "home", "무인양품 수납함 세트",
     "무인양품 폴리프로필렌 수납함 여러개 세트로 판매해요.", 85000, "서울숲",
     "photo-1558618666-fcd25c85cd64"),
    ("user2", "digital", "아이패드 에어 5세대",
     "아이패드 에어 5세대 64GB 모델입니다. 애플펜슬 포함.", 650000, "뚝섬동",
     "photo-1544244015-0df4b3ffc6b0"),
    ("user1", "clothing", "조던 1 하이 시카고",
     "에어조던 1 하이 시카고 색상입니다. 사이즈 270.", 180000, "성수동",
     "photo-1460353581641-37baddab0fa2"),
    ("user3", "digital", "닌텐도 스위치 OLED",
     "닌텐도 스위치 OLED 모델입니다. 게임 몇개 포함해서 드려요.", 320000, "서울숲",
     "photo-1606144042614-b2417e99c4e3"),
    ("user2", "home", "바디프랜드 안마의자",
     "바디프랜드 안마의자입니다. 이사가서 급매로 내놓아요.", 1200000, "뚝섬동",
     "photo-1586023492125-27b2c045efd7"),
]


def seed_data():
    """
    Insert the sample categories, users and items. Safe to run repeatedly:
    existing slugs and users are left alone, and items are only added while
    none of the sample sellers has a listing yet.
    """
    with get_session() as session:
        existing_slugs = set(session.exec(select(Category.slug)).all())
        for name, slug in CATEGORIES:
            if slug not in existing_slugs:
                session.add(Category(name=name, slug=slug))

        for user in USERS:
            if session.get(User, user["id"]) is None:
                session.add(User(**user))
        session.commit()

        seller_ids = [u["id"] for u in USERS]
        if session.exec(select(Item).where(col(Item.seller_id).in_(seller_ids))).first() is not None:
            logger.info("Sample items already present, skipping")
            return

        category_ids = {c.slug: c.id for c in session.exec(select(Category)).all()}
        for seller, slug, title, description, price, region, photo in ITEMS:
            session.add(Item(
                seller_id=seller,
                title=title,
                description=description,
                price=price,
                category_id=category_ids[slug],
                region_code=region,
                images=[UNSPLASH + photo],
            ))
        session.commit()
        logger.info(f"Seeded {len(CATEGORIES)} categories, {len(USERS)} users, {len(ITEMS)} items")


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
    try:
        create_db_and_tables()
        seed_data()
    except Exception:
        logger.exception("Error seeding data")
        return 1
    logger.info("Seed data generated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
