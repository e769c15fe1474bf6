# storefront/seed.py
import logging

from sqlalchemy.engine import Engine
from sqlmodel import Session

from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository

logger = logging.getLogger(__name__)

_PLACEHOLDER = "https://via.placeholder.com/300x300/{bg}/{fg}?text={text}"

# (name, description, price, category, stock, background, foreground)
SAMPLE_PRODUCTS: list[tuple[str, str, float, str, int, str, str]] = [
    # Pinturas
    ("Pintura Acrílica Blanca", "Pintura acrílica de alta calidad color blanco mate", 15.99, "Pinturas", 50, "FFFFFF", "000000"),
    ("Pintura Acrílica Roja", "Pintura acrílica brillante color rojo intenso", 18.50, "Pinturas", 35, "FF0000", "FFFFFF"),
    ("Pintura Acrílica Azul", "Pintura acrílica color azul cielo, perfecta para interiores", 17.25, "Pinturas", 42, "0000FF", "FFFFFF"),
    ("Pintura Acrílica Verde", "Pintura acrílica color verde bosque, ideal para exteriores", 19.75, "Pinturas", 28, "008000", "FFFFFF"),
    ("Pintura Acrílica Amarilla", "Pintura acrílica color amarillo sol, alta cobertura", 16.80, "Pinturas", 33, "FFFF00", "000000"),
    # Pinceles
    ("Pincel Plano N°2", "Pincel de cerdas naturales, ideal para detalles finos", 5.50, "Pinceles", 75, "8B4513", "FFFFFF"),
    ("Pincel Redondo N°6", "Pincel redondo de pelo sintético, multiuso", 7.25, "Pinceles", 60, "654321", "FFFFFF"),
    ('Pincel Brocha 3"', "Brocha ancha para pintar superficies grandes", 12.00, "Pinceles", 25, "A0522D", "FFFFFF"),
    ("Set de Pinceles", "Set de 5 pinceles de diferentes tamaños", 25.99, "Pinceles", 20, "D2691E", "FFFFFF"),
    # Rodillos
    ("Rodillo Antigoteo", "Rodillo con sistema antigoteo para paredes", 8.75, "Rodillos", 40, "FF6347", "FFFFFF"),
    ("Rodillo Texturizado", "Rodillo para crear texturas en paredes", 11.50, "Rodillos", 22, "CD5C5C", "FFFFFF"),
    ("Rodillo Mini", "Rodillo pequeño para rincones y espacios reducidos", 4.25, "Rodillos", 55, "DC143C", "FFFFFF"),
    # Herramientas
    ("Bandeja para Pintura", "Bandeja plástica con rejilla para rodillo", 6.99, "Herramientas", 45, "2F4F4F", "FFFFFF"),
    ("Espátula Metálica", "Espátula de acero inoxidable para raspar", 9.25, "Herramientas", 38, "708090", "FFFFFF"),
    ("Cinta de Pintor", "Cinta adhesiva especial para delimitar áreas", 3.50, "Herramientas", 80, "F0E68C", "000000"),
    ("Lija Grano 120", "Papel de lija grano 120 para preparar superficies", 2.75, "Herramientas", 100, "DEB887", "000000"),
    # Sprays
    ("Spray Negro Mate", "Pintura en spray color negro mate", 8.99, "Sprays", 30, "000000", "FFFFFF"),
    ("Spray Plateado", "Pintura en spray color plateado metalizado", 10.50, "Sprays", 25, "C0C0C0", "000000"),
    ("Spray Transparente", "Barniz en spray transparente brillante", 12.25, "Sprays", 18, "F8F8FF", "000000"),
    # Imprimantes
    ("Imprimante Universal", "Imprimante base agua para todo tipo de superficies", 22.50, "Imprimantes", 15, "DCDCDC", "000000"),
    ("Imprimante Anticorrosivo", "Imprimante especial para metal, previene óxido", 28.75, "Imprimantes", 12, "B22222", "FFFFFF"),
    # Barnices
    ("Barniz Mate", "Barniz transparente acabado mate", 24.99, "Barnices", 20, "F5F5DC", "000000"),
    ("Barniz Brillante", "Barniz transparente acabado brillante", 26.50, "Barnices", 18, "FFD700", "000000"),
    # Accesorios
    ("Overol de Pintor", "Overol desechable para proteger la ropa", 4.99, "Accesorios", 65, "FFFFFF", "000000"),
    ("Guantes de Nitrilo", "Guantes desechables resistentes a químicos", 8.25, "Accesorios", 90, "4169E1", "FFFFFF"),
]


def sample_products() -> list[Product]:
    products = []
    for name, description, price, category, stock, bg, fg in SAMPLE_PRODUCTS:
        products.append(
            Product(
                name=name,
                description=description,
                price=price,
                category=category,
                stock=stock,
                image_url=_PLACEHOLDER.format(bg=bg, fg=fg, text=name.replace(" ", "+")),
            )
        )
    return products


def seed_catalog(engine: Engine, repo: ProductRepository | None = None) -> int:
    """
    Insert the sample catalog if the products table is empty.

    Returns the number of inserted products (0 if the catalog already had
    rows).
    """
    repo = repo or ProductRepository()
    with Session(engine) as session:
        if repo.count(session) > 0:
            return 0
        created = repo.create_many(session, sample_products())

    logger.info("Seeded %s sample products", created)
    return created
