import attrs


@attrs.frozen
class Requester:
    """
    Identity owning holds and orders.

    `owner_key` is the opaque string stored on intents/orders: `user:<id>` for an
    authenticated user, `anon:<uuid7>` for an anonymous shopper cookie.
    Never sent to other clients.
    """

    owner_key: str
    user_id: int | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @classmethod
    def for_user(cls, user_id: int) -> 'Requester':
        return cls(owner_key=f'user:{user_id}', user_id=user_id)

    @classmethod
    def anonymous(cls, token_id: str) -> 'Requester':
        return cls(owner_key=f'anon:{token_id}')
