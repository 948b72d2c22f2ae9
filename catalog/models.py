from pydantic import BaseModel, ConfigDict, Field, model_validator


class Product(BaseModel):
    """Immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    name: str
    description: str = ""
    category: str = ""
    price: float = Field(..., ge=0)
    bottom_price: float = Field(0, ge=0, description="Floor below which no negotiated discount may go.")
    rating: float = Field(0, ge=0, le=5)
    colors: tuple[str, ...] = ()
    image: str | None = None

    @model_validator(mode="after")
    def _check_bottom_price(self):
        if self.bottom_price > self.price:
            raise ValueError(f"bottom_price {self.bottom_price} exceeds price {self.price}")
        return self

    def summary(self) -> dict:
        """Compact view used in cart lines and chat observations."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
        }
