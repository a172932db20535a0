from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from fitcoach.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    avatar = Column(String(1024))
    weight_kg = Column(Float)
    height_cm = Column(Float)
    age = Column(Integer)
    experience_level = Column(String(32))
    equipment_access = Column(Text)  # JSON, tagged by "kind"
    injuries = Column(Text)  # JSON list of free-text descriptions
    workout_days_per_week = Column(Integer)


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    category = Column(String(32), nullable=False)
    target = Column(Text)  # JSON {exercise, movement, metric}
    direction = Column(String(16))
    value = Column(Float)
    unit = Column(String(32))
    is_active = Column(Boolean, nullable=False, default=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())


class TrainingPlan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    goal_id = Column(Integer, ForeignKey("goals.id"))
    name = Column(String(255), nullable=False)
    training_strategy = Column(Text)  # JSON
    diet_plan = Column(Text)  # JSON {dailyCalories, meals}
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    body_part = Column(String(64), nullable=False, index=True)
    is_compound = Column(Boolean, nullable=False, default=False)
    equipment = Column(String(128))
    instructions = Column(Text)  # JSON list


class WorkoutSession(Base):
    __tablename__ = "workout_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    plan_id = Column(Integer, ForeignKey("plans.id"), index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), index=True)
    date = Column(String(10), index=True, nullable=False)
    week_number = Column(Integer)
    day_of_week = Column(String(16))
    intensity = Column(String(16), nullable=False, default="moderate")
    workout_type = Column(String(16), nullable=False, default="main")
    focus = Column(String(255))
    notes = Column(Text)


class ExerciseSet(Base):
    __tablename__ = "exercise_sets"
    __table_args__ = (UniqueConstraint("session_id", "exercise_id", "set_number"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("workout_sessions.id"), index=True, nullable=False)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), index=True, nullable=False)
    set_number = Column(Integer, nullable=False)
    planned_weight = Column(Float, nullable=False, default=0)
    planned_reps = Column(Integer, nullable=False, default=0)
    actual_weight = Column(Float)
    actual_reps = Column(Integer)
    actual_rpe = Column(Float)
    completed = Column(Boolean, nullable=False, default=False)


class Meal(Base):
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    foods = Column(Text, nullable=False)  # JSON list
    calories = Column(Float, nullable=False)
    instructions = Column(Text, nullable=False)  # JSON list
    meal_type = Column(Text)  # JSON list, e.g. ["breakfast", "lunch"]


class DailyMeal(Base):
    __tablename__ = "daily_meals"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("workout_sessions.id"), index=True, nullable=False)
    meal_id = Column(Integer, ForeignKey("meals.id"), index=True, nullable=False)
    meal_type = Column(String(16), nullable=False)
    sort_order = Column(Integer, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)


class MealLog(Base):
    __tablename__ = "meal_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    date = Column(String(10), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    calories = Column(Float, nullable=False)
    protein = Column(Float)
    meal_type = Column(String(16))


class BlockedItem(Base):
    __tablename__ = "blocked_items"
    __table_args__ = (UniqueConstraint("user_id", "item_type", "item_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    item_type = Column(String(16), nullable=False)
    item_id = Column(String(64), nullable=False)
    item_name = Column(String(255), nullable=False)


class DailyTracking(Base):
    __tablename__ = "daily_tracking"
    __table_args__ = (UniqueConstraint("user_id", "date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    date = Column(String(10), nullable=False)
    water_intake = Column(Float, nullable=False, default=0)
    steps = Column(Integer, nullable=False, default=0)
    weight_kg = Column(Float)
    distance_km = Column(Float)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    role_type = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
