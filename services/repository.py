"""
Catalog Repository

Database access used by the costing and stock services. Reads always go
to the database so callers see the latest recipe and stock, and stock
writes are compare-and-swap on Ingredient.version.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from models import db, Ingredient, Product, RecipeItem, FixedCost, StockMovement
from .errors import PersistenceFailure

log = logging.getLogger(__name__)


class CatalogRepository:
    """
    Ingredient, product and stock store backed by a SQLAlchemy session.

    write_stock() ends the session's transaction: a successful write commits
    it and a version conflict or database error rolls it back. Anything the
    caller left pending in the same session is committed or discarded with
    it, so flush or commit your own changes before deducting stock.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # ============ READS ============

    def get_ingredient(self, ingredient_id):
        """Fresh read of an ingredient (bypasses objects cached in the session)."""
        stmt = (
            select(Ingredient)
            .where(Ingredient.id == ingredient_id)
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_ingredients(self, ingredient_ids=None):
        """Ingredient catalog as a dict of id -> Ingredient."""
        stmt = select(Ingredient).execution_options(populate_existing=True)
        if ingredient_ids is not None:
            stmt = stmt.where(Ingredient.id.in_(list(ingredient_ids)))
        return {ing.id: ing for ing in self.session.execute(stmt).scalars()}

    def get_product(self, product_id):
        return self.session.get(Product, product_id, populate_existing=True)

    def get_recipe(self, product_id):
        """Fresh read of a product's recipe lines; empty list when none exist."""
        stmt = (
            select(RecipeItem)
            .where(RecipeItem.product_id == product_id)
            .order_by(RecipeItem.position, RecipeItem.id)
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars())

    def catalog_for(self, product):
        """Ingredients referenced by a product's recipe."""
        return self.get_ingredients({item.ingredient_id for item in product.recipe})

    def get_fixed_costs(self):
        return list(self.session.execute(select(FixedCost)).scalars())

    def list_movements(self, movement_type=None, ingredient_id=None, limit=100):
        """Stock movements, newest first."""
        stmt = select(StockMovement).order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        if movement_type:
            stmt = stmt.where(StockMovement.type == movement_type)
        if ingredient_id:
            stmt = stmt.where(StockMovement.ingredient_id == ingredient_id)
        return list(self.session.execute(stmt.limit(limit)).scalars())

    # ============ WRITES ============

    def write_stock(self, ingredient_id, expected_version, new_stock, movement=None):
        """
        Set current_stock if the row version is still expected_version.

        The movement row, if given, is committed in the same transaction.
        Commits or rolls back the whole session (see the class docstring).

        Returns:
            True if written, False if another writer changed the row first
        """
        stmt = (
            update(Ingredient)
            .where(Ingredient.id == ingredient_id, Ingredient.version == expected_version)
            .values(current_stock=new_stock, version=Ingredient.version + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                return False
            if movement is not None:
                self.session.add(StockMovement(ingredient_id=ingredient_id, **movement))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.exception('Stock write failed for ingredient %s', ingredient_id)
            raise PersistenceFailure(ingredient_id, e) from e
        return True
