"""Operations dashboard engine: record filtering, classification and metrics."""
